from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..models.finance import TransactionType
from ..schemas.finance import (
    BillValueRead,
    BillValueWrite,
    CategoryCreate,
    CategoryRead,
    FinancialTransactionCreate,
    FinancialTransactionRead,
    FixedBillCreate,
    FixedBillRead,
    GoalCreate,
    GoalProgress,
    GoalRead,
    MonthSummary,
)
from ..services import (
    create_category,
    create_fixed_bill,
    create_goal,
    create_transaction,
    get_month_summary,
    list_categories,
    list_fixed_bills,
    list_goals,
    list_month_transactions,
    mark_bill_paid,
    set_bill_value,
    update_goal_progress,
)
from ..services.finances import (
    BillNotFoundError,
    GoalNotFoundError,
    month_bounds,
    to_transaction_read,
)

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]
UserQuery = Annotated[UUID, Query()]
MonthQuery = Annotated[Optional[int], Query(ge=1, le=12)]
YearQuery = Annotated[Optional[int], Query(ge=2000, le=2100)]


@router.get("/categories", response_model=list[CategoryRead])
async def list_categories_endpoint(
    session: SessionDep,
    user_id: UserQuery,
    category_type: Optional[TransactionType] = Query(default=None),
) -> list[CategoryRead]:
    categories = await list_categories(session, user_id, category_type)
    return [CategoryRead.model_validate(category) for category in categories]


@router.post("/categories", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category_endpoint(payload: CategoryCreate, session: SessionDep) -> CategoryRead:
    category = await create_category(session, payload)
    return CategoryRead.model_validate(category)


@router.get("/transactions", response_model=list[FinancialTransactionRead])
async def list_transactions_endpoint(
    session: SessionDep,
    user_id: UserQuery,
    month: MonthQuery = None,
    year: YearQuery = None,
) -> list[FinancialTransactionRead]:
    month, year = month_bounds(month, year)
    transactions = await list_month_transactions(session, user_id, month, year)
    return [to_transaction_read(tx) for tx in transactions]


@router.post(
    "/transactions", response_model=FinancialTransactionRead, status_code=status.HTTP_201_CREATED
)
async def create_transaction_endpoint(
    payload: FinancialTransactionCreate, session: SessionDep
) -> FinancialTransactionRead:
    try:
        transaction = await create_transaction(session, payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return to_transaction_read(transaction)


@router.get("/summary", response_model=MonthSummary)
async def month_summary_endpoint(
    session: SessionDep,
    user_id: UserQuery,
    month: MonthQuery = None,
    year: YearQuery = None,
) -> MonthSummary:
    month, year = month_bounds(month, year)
    return await get_month_summary(session, user_id, month, year)


@router.get("/bills", response_model=list[FixedBillRead])
async def list_bills_endpoint(
    session: SessionDep,
    user_id: UserQuery,
    month: MonthQuery = None,
    year: YearQuery = None,
) -> list[FixedBillRead]:
    month, year = month_bounds(month, year)
    return await list_fixed_bills(session, user_id, month, year)


@router.post("/bills", response_model=FixedBillRead, status_code=status.HTTP_201_CREATED)
async def create_bill_endpoint(payload: FixedBillCreate, session: SessionDep) -> FixedBillRead:
    bill = await create_fixed_bill(session, payload)
    return FixedBillRead.model_validate(bill)


@router.put("/bills/{bill_id}/values/{year}/{month}", response_model=BillValueRead)
async def set_bill_value_endpoint(
    bill_id: UUID, year: int, month: int, payload: BillValueWrite, session: SessionDep
) -> BillValueRead:
    if not 1 <= month <= 12:
        raise HTTPException(status_code=422, detail="Month must be between 1 and 12")
    try:
        value = await set_bill_value(session, bill_id, month, year, payload.amount)
    except BillNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return BillValueRead.model_validate(value)


@router.post("/bills/{bill_id}/values/{year}/{month}/paid", response_model=BillValueRead)
async def mark_bill_paid_endpoint(
    bill_id: UUID, year: int, month: int, session: SessionDep
) -> BillValueRead:
    try:
        value = await mark_bill_paid(session, bill_id, month, year)
    except BillNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return BillValueRead.model_validate(value)


@router.get("/goals", response_model=list[GoalRead])
async def list_goals_endpoint(session: SessionDep, user_id: UserQuery) -> list[GoalRead]:
    goals = await list_goals(session, user_id)
    return [GoalRead.model_validate(goal) for goal in goals]


@router.post("/goals", response_model=GoalRead, status_code=status.HTTP_201_CREATED)
async def create_goal_endpoint(payload: GoalCreate, session: SessionDep) -> GoalRead:
    goal = await create_goal(session, payload)
    return GoalRead.model_validate(goal)


@router.post("/goals/{goal_id}/progress", response_model=GoalRead)
async def goal_progress_endpoint(
    goal_id: UUID, payload: GoalProgress, session: SessionDep
) -> GoalRead:
    try:
        goal = await update_goal_progress(session, goal_id, payload.amount)
    except GoalNotFoundError:
        raise HTTPException(status_code=404, detail="Goal not found")
    return GoalRead.model_validate(goal)
