from __future__ import annotations

import logging
from datetime import date, datetime, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config import get_settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=8)
def resolve_timezone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        logger.warning("Unknown timezone %r; falling back to UTC.", name)
        return timezone.utc


def user_timezone() -> tzinfo:
    return resolve_timezone(get_settings().timezone)


def local_now(tz: tzinfo | None = None) -> datetime:
    return datetime.now(tz or user_timezone())


def local_today(tz: tzinfo | None = None) -> date:
    return local_now(tz).date()
