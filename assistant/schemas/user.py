from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    telegram_id: int = Field(ge=0)
    full_name: str | None = Field(default=None, max_length=255)
    display_name: str | None = Field(default=None, max_length=64)


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    telegram_id: int
    full_name: str | None
    display_name: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
