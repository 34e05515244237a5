from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import BigInteger, ForeignKey, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class BotState(Base):
    """The single mutable conversation row kept for each user."""

    __tablename__ = "bot_states"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True
    )
    current_state: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    state_data: Mapped[dict[str, Any]] = mapped_column(JSONB, default=dict, nullable=False)
    last_message_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
