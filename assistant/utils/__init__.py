from .timezone import local_now, local_today, resolve_timezone, user_timezone

__all__ = [
    "local_now",
    "local_today",
    "resolve_timezone",
    "user_timezone",
]
