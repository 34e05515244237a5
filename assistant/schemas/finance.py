from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.finance import TransactionType


class CategoryCreate(BaseModel):
    user_id: UUID
    name: str = Field(min_length=1, max_length=64)
    emoji: str = Field(default="📦", max_length=16)
    category_type: TransactionType


class CategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    emoji: str
    category_type: TransactionType


class FinancialTransactionCreate(BaseModel):
    user_id: UUID
    transaction_type: TransactionType
    amount: Decimal = Field(gt=0)
    category_id: Optional[UUID] = None
    description: Optional[str] = Field(default=None, max_length=512)
    occurred_on: Optional[date] = None

    @field_validator("transaction_type", mode="before")
    @classmethod
    def _normalise_type(cls, value: TransactionType | str) -> TransactionType | str:
        """Allow case-insensitive transaction types from external clients."""
        if isinstance(value, str):
            return value.strip().lower()
        return value


class FinancialTransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    transaction_type: TransactionType
    amount: Decimal
    description: Optional[str] = None
    occurred_on: date
    category_id: Optional[UUID] = None
    category_name: Optional[str] = None
    category_emoji: Optional[str] = None


class MonthSummary(BaseModel):
    month: int
    year: int
    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")


class FixedBillCreate(BaseModel):
    user_id: UUID
    name: str = Field(min_length=1, max_length=64)
    emoji: str = Field(default="🧾", max_length=16)
    due_day: int = Field(ge=1, le=31)
    amount: Optional[Decimal] = Field(default=None, ge=0)
    is_variable: bool = False
    estimated_amount: Optional[Decimal] = Field(default=None, ge=0)
    billing_day: Optional[int] = Field(default=None, ge=1, le=31)


class BillValueRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: int
    year: int
    amount: Decimal
    is_paid: bool
    paid_at: Optional[datetime] = None


class BillValueWrite(BaseModel):
    amount: Decimal = Field(ge=0)


class FixedBillRead(BaseModel):
    """A bill together with its value for the requested month, if defined."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    emoji: str
    amount: Optional[Decimal] = None
    is_variable: bool
    estimated_amount: Optional[Decimal] = None
    due_day: int
    billing_day: Optional[int] = None
    month_value: Optional[BillValueRead] = None


class GoalCreate(BaseModel):
    user_id: UUID
    name: str = Field(min_length=1, max_length=128)
    target_amount: Decimal = Field(gt=0)


class GoalProgress(BaseModel):
    amount: Decimal


class GoalRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    target_amount: Decimal
    current_amount: Decimal
    is_completed: bool
    completed_at: Optional[datetime] = None
