from .events import cancel_draft, confirm_draft, get_active_draft, start_draft, update_draft
from .finances import (
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
from .health import get_sleep_overview, get_water_overview, log_sleep, log_water
from .llm import get_intent_classifier
from .state import clear_state, get_state, set_last_message_id, set_state, update_state_data
from .users import create_user, get_user, get_user_by_telegram_id

__all__ = [
    "cancel_draft",
    "confirm_draft",
    "get_active_draft",
    "start_draft",
    "update_draft",
    "create_category",
    "create_fixed_bill",
    "create_goal",
    "create_transaction",
    "get_month_summary",
    "list_categories",
    "list_fixed_bills",
    "list_goals",
    "list_month_transactions",
    "mark_bill_paid",
    "set_bill_value",
    "update_goal_progress",
    "get_sleep_overview",
    "get_water_overview",
    "log_sleep",
    "log_water",
    "get_intent_classifier",
    "clear_state",
    "get_state",
    "set_last_message_id",
    "set_state",
    "update_state_data",
    "create_user",
    "get_user",
    "get_user_by_telegram_id",
]
