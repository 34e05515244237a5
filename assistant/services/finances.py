from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import extract, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.finance import (
    BillValue,
    FinancialCategory,
    FinancialGoal,
    FinancialTransaction,
    FixedBill,
    TransactionType,
)
from ..schemas.finance import (
    BillValueRead,
    CategoryCreate,
    FinancialTransactionCreate,
    FinancialTransactionRead,
    FixedBillCreate,
    FixedBillRead,
    GoalCreate,
    MonthSummary,
)
from ..utils.timezone import local_today


class BillNotFoundError(Exception):
    """Raised when a fixed bill or its month value cannot be found."""


class GoalNotFoundError(Exception):
    """Raised when a financial goal cannot be found."""


async def list_categories(
    session: AsyncSession,
    user_id: UUID,
    category_type: Optional[TransactionType] = None,
) -> Sequence[FinancialCategory]:
    stmt = select(FinancialCategory).where(FinancialCategory.user_id == user_id)
    if category_type:
        stmt = stmt.where(FinancialCategory.category_type == category_type)
    result = await session.execute(stmt.order_by(FinancialCategory.name))
    return result.scalars().all()


async def create_category(session: AsyncSession, payload: CategoryCreate) -> FinancialCategory:
    category = FinancialCategory(**payload.model_dump())
    session.add(category)
    await session.commit()
    await session.refresh(category)
    return category


def to_transaction_read(transaction: FinancialTransaction) -> FinancialTransactionRead:
    category = transaction.category
    return FinancialTransactionRead(
        id=transaction.id,
        transaction_type=transaction.transaction_type,
        amount=transaction.amount,
        description=transaction.description,
        occurred_on=transaction.occurred_on,
        category_id=transaction.category_id,
        category_name=category.name if category else None,
        category_emoji=category.emoji if category else None,
    )


async def create_transaction(
    session: AsyncSession, payload: FinancialTransactionCreate
) -> FinancialTransaction:
    if payload.category_id:
        category = await session.get(FinancialCategory, payload.category_id)
        if not category or category.user_id != payload.user_id:
            raise ValueError("Category not found")
    transaction = FinancialTransaction(
        user_id=payload.user_id,
        category_id=payload.category_id,
        transaction_type=payload.transaction_type,
        amount=payload.amount.quantize(Decimal("0.01")),
        description=payload.description,
        occurred_on=payload.occurred_on or local_today(),
    )
    session.add(transaction)
    await session.commit()
    await session.refresh(transaction, attribute_names=["category"])
    return transaction


def _in_month(column, month: int, year: int):
    return (extract("month", column) == month) & (extract("year", column) == year)


async def list_month_transactions(
    session: AsyncSession, user_id: UUID, month: int, year: int
) -> Sequence[FinancialTransaction]:
    result = await session.execute(
        select(FinancialTransaction)
        .where(
            FinancialTransaction.user_id == user_id,
            _in_month(FinancialTransaction.occurred_on, month, year),
        )
        .order_by(FinancialTransaction.occurred_on.desc(), FinancialTransaction.created_at.desc())
    )
    return result.scalars().unique().all()


async def get_month_summary(
    session: AsyncSession, user_id: UUID, month: int, year: int
) -> MonthSummary:
    result = await session.execute(
        select(FinancialTransaction.transaction_type, func.coalesce(func.sum(FinancialTransaction.amount), 0))
        .where(
            FinancialTransaction.user_id == user_id,
            _in_month(FinancialTransaction.occurred_on, month, year),
        )
        .group_by(FinancialTransaction.transaction_type)
    )
    totals = {tx_type: Decimal(str(total)) for tx_type, total in result.all()}
    income = totals.get(TransactionType.INCOME, Decimal("0"))
    expense = totals.get(TransactionType.EXPENSE, Decimal("0"))
    return MonthSummary(
        month=month,
        year=year,
        total_income=income,
        total_expense=expense,
        balance=income - expense,
    )


async def create_fixed_bill(session: AsyncSession, payload: FixedBillCreate) -> FixedBill:
    bill = FixedBill(**payload.model_dump())
    session.add(bill)
    await session.commit()
    await session.refresh(bill)
    return bill


async def list_fixed_bills(
    session: AsyncSession, user_id: UUID, month: int, year: int
) -> list[FixedBillRead]:
    """Active bills ordered by due day, each with its value for the month."""
    result = await session.execute(
        select(FixedBill, BillValue)
        .outerjoin(
            BillValue,
            (BillValue.bill_id == FixedBill.id) & (BillValue.month == month) & (BillValue.year == year),
        )
        .where(FixedBill.user_id == user_id, FixedBill.is_active.is_(True))
        .order_by(FixedBill.due_day)
    )
    bills: list[FixedBillRead] = []
    for bill, value in result.all():
        read = FixedBillRead.model_validate(bill)
        if value is not None:
            read.month_value = BillValueRead.model_validate(value)
        bills.append(read)
    return bills


async def _get_bill(session: AsyncSession, bill_id: UUID) -> FixedBill:
    bill = await session.get(FixedBill, bill_id)
    if not bill or not bill.is_active:
        raise BillNotFoundError("Bill not found")
    return bill


async def get_bill_value(
    session: AsyncSession, bill_id: UUID, month: int, year: int
) -> Optional[BillValue]:
    result = await session.execute(
        select(BillValue).where(
            BillValue.bill_id == bill_id, BillValue.month == month, BillValue.year == year
        )
    )
    return result.scalars().first()


async def set_bill_value(
    session: AsyncSession, bill_id: UUID, month: int, year: int, amount: Decimal
) -> BillValue:
    await _get_bill(session, bill_id)
    stmt = insert(BillValue).values(
        bill_id=bill_id, month=month, year=year, amount=amount, defined_at=utcnow()
    )
    stmt = stmt.on_conflict_do_update(
        constraint="uq_bill_values_period",
        set_={"amount": amount, "defined_at": utcnow()},
    )
    await session.execute(stmt)
    await session.commit()
    value = await get_bill_value(session, bill_id, month, year)
    if value is None:
        raise BillNotFoundError("Bill value was not stored")
    return value


async def mark_bill_paid(session: AsyncSession, bill_id: UUID, month: int, year: int) -> BillValue:
    value = await get_bill_value(session, bill_id, month, year)
    if value is None:
        raise BillNotFoundError("Define the bill amount for this month first")
    value.is_paid = True
    value.paid_at = utcnow()
    await session.commit()
    await session.refresh(value)
    return value


async def list_goals(session: AsyncSession, user_id: UUID) -> Sequence[FinancialGoal]:
    result = await session.execute(
        select(FinancialGoal)
        .where(FinancialGoal.user_id == user_id)
        .order_by(FinancialGoal.is_completed, FinancialGoal.created_at.desc())
    )
    return result.scalars().all()


async def create_goal(session: AsyncSession, payload: GoalCreate) -> FinancialGoal:
    goal = FinancialGoal(
        user_id=payload.user_id,
        name=payload.name,
        target_amount=payload.target_amount,
        current_amount=Decimal("0"),
    )
    session.add(goal)
    await session.commit()
    await session.refresh(goal)
    return goal


async def update_goal_progress(session: AsyncSession, goal_id: UUID, amount: Decimal) -> FinancialGoal:
    goal = await session.get(FinancialGoal, goal_id)
    if not goal:
        raise GoalNotFoundError("Goal not found")
    goal.current_amount = (goal.current_amount or Decimal("0")) + amount
    goal.is_completed = goal.current_amount >= goal.target_amount
    goal.completed_at = utcnow() if goal.is_completed else None
    await session.commit()
    await session.refresh(goal)
    return goal


def month_bounds(month: Optional[int], year: Optional[int]) -> tuple[int, int]:
    today = local_today()
    return (month or today.month, year or today.year)
