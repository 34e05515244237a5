from __future__ import annotations

from datetime import date, time
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, Date, Enum as SqlEnum, ForeignKey, Index, Text, Time, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class EventStatus(str, Enum):
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Event(Base):
    """Calendar event; lives as a draft while the wizard fills it in."""

    __tablename__ = "events"
    __table_args__ = (
        Index(
            "uq_events_one_draft_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'draft'"),
        ),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    event_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    start_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    end_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    all_day: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    status: Mapped[EventStatus] = mapped_column(
        SqlEnum(
            EventStatus,
            name="eventstatus",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        default=EventStatus.DRAFT,
        nullable=False,
    )
