from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


_transaction_type = SqlEnum(
    TransactionType,
    name="transactiontype",
    values_callable=lambda enum: [member.value for member in enum],
)


class FinancialCategory(Base):
    __tablename__ = "financial_categories"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    emoji: Mapped[str] = mapped_column(String(16), default="📦", nullable=False)
    category_type: Mapped[TransactionType] = mapped_column(_transaction_type, nullable=False)


class FinancialTransaction(Base):
    """Money in or out, optionally tagged with a category."""

    __tablename__ = "financial_transactions"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("financial_categories.id", ondelete="SET NULL"), nullable=True
    )
    transaction_type: Mapped[TransactionType] = mapped_column(_transaction_type, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    occurred_on: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    category: Mapped[Optional[FinancialCategory]] = relationship(lazy="joined")


class FixedBill(Base):
    """Recurring monthly bill; variable bills get their amount per month."""

    __tablename__ = "fixed_bills"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    emoji: Mapped[str] = mapped_column(String(16), default="🧾", nullable=False)
    amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    is_variable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    estimated_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    due_day: Mapped[int] = mapped_column(Integer, nullable=False)
    billing_day: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class BillValue(Base):
    __tablename__ = "bill_values"
    __table_args__ = (UniqueConstraint("bill_id", "month", "year", name="uq_bill_values_period"),)

    bill_id: Mapped[UUID] = mapped_column(
        ForeignKey("fixed_bills.id", ondelete="CASCADE"), nullable=False, index=True
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    defined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class FinancialGoal(Base):
    __tablename__ = "financial_goals"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    target_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    current_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), default=Decimal("0"), nullable=False
    )
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
