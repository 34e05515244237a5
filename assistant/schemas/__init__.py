from .event import EventDraftCreate, EventDraftUpdate, EventRead
from .finance import (
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
from .health import (
    SleepDay,
    SleepLogCreate,
    SleepLogRead,
    SleepStats,
    WaterDay,
    WaterLogCreate,
    WaterLogRead,
    WaterStats,
)
from .intent import ClassifiedIntent, ClassifyRequest, FinanceIntentData, IntentType, WaterIntentData
from .state import BotStateDataUpdate, BotStateRead, BotStateWrite, LastMessageUpdate
from .user import UserCreate, UserRead

__all__ = [
    "EventDraftCreate",
    "EventDraftUpdate",
    "EventRead",
    "BillValueRead",
    "BillValueWrite",
    "CategoryCreate",
    "CategoryRead",
    "FinancialTransactionCreate",
    "FinancialTransactionRead",
    "FixedBillCreate",
    "FixedBillRead",
    "GoalCreate",
    "GoalProgress",
    "GoalRead",
    "MonthSummary",
    "SleepDay",
    "SleepLogCreate",
    "SleepLogRead",
    "SleepStats",
    "WaterDay",
    "WaterLogCreate",
    "WaterLogRead",
    "WaterStats",
    "ClassifiedIntent",
    "ClassifyRequest",
    "FinanceIntentData",
    "IntentType",
    "WaterIntentData",
    "BotStateDataUpdate",
    "BotStateRead",
    "BotStateWrite",
    "LastMessageUpdate",
    "UserCreate",
    "UserRead",
]
