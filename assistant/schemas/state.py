from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class BotStateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    current_state: Optional[str] = None
    state_data: dict[str, Any] = Field(default_factory=dict)
    last_message_id: Optional[int] = None


class BotStateWrite(BaseModel):
    """Replaces the current state and its data bag."""

    current_state: Optional[str] = Field(default=None, max_length=32)
    state_data: dict[str, Any] = Field(default_factory=dict)


class BotStateDataUpdate(BaseModel):
    """Keys merged into the existing data bag; the state tag is left alone."""

    state_data: dict[str, Any]


class LastMessageUpdate(BaseModel):
    message_id: Optional[int] = None
