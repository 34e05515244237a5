from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import DateTime, Enum as SqlEnum, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class SleepLogKind(str, Enum):
    SLEEP = "sleep"
    WAKE = "wake"


class SleepLog(Base):
    """A 'going to sleep' or 'woke up' marker."""

    __tablename__ = "sleep_logs"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    kind: Mapped[SleepLogKind] = mapped_column(
        SqlEnum(
            SleepLogKind,
            name="sleeplogkind",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )
    logged_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )


class WaterLog(Base):
    __tablename__ = "water_logs"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount_ml: Mapped[int] = mapped_column(Integer, nullable=False)
    logged_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
