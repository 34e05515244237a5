"""Per-user coordination kept in python-telegram-bot's ``user_data``.

Updates for one user are handled one at a time under an ``asyncio.Lock``.
The delayed hub redraw after a wake-up is a task owned by the same mapping,
so any later update from that user cancels it before taking the lock.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, Optional

logger = logging.getLogger(__name__)

LOCK_KEY = "session_lock"
RERENDER_KEY = "pending_rerender"


def user_lock(user_data: MutableMapping[str, Any]) -> asyncio.Lock:
    lock = user_data.get(LOCK_KEY)
    if lock is None:
        lock = asyncio.Lock()
        user_data[LOCK_KEY] = lock
    return lock


def cancel_rerender(user_data: MutableMapping[str, Any]) -> bool:
    task: Optional[asyncio.Task] = user_data.pop(RERENDER_KEY, None)
    if task is None or task.done():
        return False
    task.cancel()
    logger.debug("Cancelled pending hub redraw")
    return True


def schedule_rerender(
    user_data: MutableMapping[str, Any],
    delay: float,
    render: Callable[[], Awaitable[None]],
) -> asyncio.Task:
    """Run ``render`` after ``delay`` seconds unless the user acts first."""
    cancel_rerender(user_data)

    async def _run() -> None:
        try:
            await asyncio.sleep(delay)
            async with user_lock(user_data):
                await render()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Delayed hub redraw failed")
        finally:
            if user_data.get(RERENDER_KEY) is task:
                user_data.pop(RERENDER_KEY, None)

    task = asyncio.create_task(_run())
    user_data[RERENDER_KEY] = task
    return task
