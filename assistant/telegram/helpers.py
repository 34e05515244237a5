from __future__ import annotations

import re
from datetime import date, datetime, time, tzinfo
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from telegram.ext import ContextTypes

DATE_PATTERN = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")

CURRENCY_SYMBOLS = {"BRL": "R$", "USD": "$", "EUR": "€", "GBP": "£"}
DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def ensure_user_state(context: ContextTypes.DEFAULT_TYPE) -> dict[str, Any]:
    user_data = getattr(context, "user_data", None)
    if user_data is None:
        user_data = {}
        setattr(context, "user_data", user_data)
    return user_data


def parse_date(value: str) -> Optional[date]:
    """Parse ``dd/mm/yyyy``; anything else, or an impossible date, gives ``None``."""
    match = DATE_PATTERN.match(value.strip())
    if not match:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_time(value: str) -> Optional[time]:
    """Parse ``HH:MM`` on a 24 hour clock."""
    match = TIME_PATTERN.match(value.strip())
    if not match:
        return None
    hours, minutes = (int(part) for part in match.groups())
    if hours > 23 or minutes > 59:
        return None
    return time(hours, minutes)


def format_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def format_clock(value: time) -> str:
    return value.strftime("%H:%M")


def format_time_only(value: datetime, tz: tzinfo) -> str:
    return value.astimezone(tz).strftime("%H:%M")


def format_duration(minutes: int) -> str:
    hours, rest = divmod(max(minutes, 0), 60)
    if hours and rest:
        return f"{hours}h{rest:02d}min"
    if hours:
        return f"{hours}h"
    return f"{rest}min"


def day_name(value: date) -> str:
    return DAY_NAMES[value.weekday()]


def format_currency(amount: Any, currency: str) -> str:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return f"{amount} {currency}"
    currency_upper = currency.upper()
    symbol = CURRENCY_SYMBOLS.get(currency_upper)
    quantized = value.quantize(Decimal("0.01"))
    if symbol is None:
        return f"{quantized:,} {currency_upper}"
    sign = "-" if quantized < 0 else ""
    return f"{sign}{symbol} {abs(quantized):,}"
