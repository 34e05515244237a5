from .base import Base
from .bot_state import BotState
from .event import Event, EventStatus
from .finance import (
    BillValue,
    FinancialCategory,
    FinancialGoal,
    FinancialTransaction,
    FixedBill,
    TransactionType,
)
from .health import SleepLog, SleepLogKind, WaterLog
from .user import User

__all__ = [
    "Base",
    "BotState",
    "Event",
    "EventStatus",
    "BillValue",
    "FinancialCategory",
    "FinancialGoal",
    "FinancialTransaction",
    "FixedBill",
    "TransactionType",
    "SleepLog",
    "SleepLogKind",
    "WaterLog",
    "User",
]
