from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.health import SleepLog, SleepLogKind, WaterLog
from ..schemas.health import (
    SleepDay,
    SleepLogCreate,
    SleepStats,
    WaterDay,
    WaterLogCreate,
    WaterStats,
)
from ..utils.timezone import local_now

WEEK_DAYS = 7
MAX_SESSION_HOURS = 16


def pair_sleep_sessions(logs: Sequence[SleepLog]) -> list[tuple[datetime, datetime]]:
    """Match each 'sleep' marker with the next 'wake' marker.

    A wake without a preceding sleep is ignored, a second sleep replaces the
    first, and sessions longer than MAX_SESSION_HOURS are discarded.
    """
    sessions: list[tuple[datetime, datetime]] = []
    pending: datetime | None = None
    for log in sorted(logs, key=lambda item: item.logged_at):
        if log.kind == SleepLogKind.SLEEP:
            pending = log.logged_at
        elif pending is not None:
            if log.logged_at - pending <= timedelta(hours=MAX_SESSION_HOURS):
                sessions.append((pending, log.logged_at))
            pending = None
    return sessions


def weekly_sleep(
    sessions: Sequence[tuple[datetime, datetime]],
    now: datetime,
    tz: tzinfo,
) -> list[SleepDay]:
    """Hours slept per local day (keyed by wake-up date), oldest first."""
    today = now.astimezone(tz).date()
    totals: dict[date, float] = {}
    for slept_at, woke_at in sessions:
        day = woke_at.astimezone(tz).date()
        totals[day] = totals.get(day, 0.0) + (woke_at - slept_at).total_seconds() / 3600
    days: list[SleepDay] = []
    for offset in range(WEEK_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        hours = totals.get(day)
        days.append(SleepDay(date=day, hours=round(hours, 2) if hours is not None else None))
    return days


def summarise_sleep(
    logs: Sequence[SleepLog],
    now: datetime,
    tz: tzinfo,
) -> tuple[SleepStats, list[SleepDay]]:
    sessions = pair_sleep_sessions(logs)
    days = weekly_sleep(sessions, now, tz)
    recorded = [day.hours for day in days if day.hours is not None]

    wakes = [log.logged_at for log in logs if log.kind == SleepLogKind.WAKE]
    sleeps = [log.logged_at for log in logs if log.kind == SleepLogKind.SLEEP]
    stats = SleepStats(
        last_wake=max(wakes) if wakes else None,
        last_sleep=max(sleeps) if sleeps else None,
        avg_hours=round(sum(recorded) / len(recorded), 2) if recorded else None,
        today_sleep_hours=days[-1].hours,
    )
    return stats, days


def summarise_water(
    logs: Sequence[WaterLog],
    now: datetime,
    tz: tzinfo,
    goal_ml: int,
) -> tuple[WaterStats, list[WaterDay]]:
    today = now.astimezone(tz).date()
    totals: dict[date, int] = {}
    for log in logs:
        day = log.logged_at.astimezone(tz).date()
        totals[day] = totals.get(day, 0) + log.amount_ml

    today_ml = totals.get(today, 0)
    stats = WaterStats(
        today_ml=today_ml,
        goal_ml=goal_ml,
        percent_complete=round(today_ml / goal_ml * 100) if goal_ml else 0,
        remaining=max(goal_ml - today_ml, 0),
    )
    days = [
        WaterDay(date=day, total_ml=totals.get(day, 0))
        for day in (today - timedelta(days=offset) for offset in range(WEEK_DAYS - 1, -1, -1))
    ]
    return stats, days


def _window_start(now: datetime, tz: tzinfo) -> datetime:
    # One extra day so a session that started before the window still pairs.
    local = now.astimezone(tz)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - timedelta(days=WEEK_DAYS)


async def log_sleep(session: AsyncSession, payload: SleepLogCreate) -> SleepLog:
    log = SleepLog(user_id=payload.user_id, kind=payload.kind)
    session.add(log)
    await session.commit()
    await session.refresh(log)
    return log


async def _latest_sleep_marker(
    session: AsyncSession, user_id: UUID, kind: SleepLogKind
) -> Optional[SleepLog]:
    result = await session.execute(
        select(SleepLog)
        .where(SleepLog.user_id == user_id, SleepLog.kind == kind)
        .order_by(SleepLog.logged_at.desc())
        .limit(1)
    )
    return result.scalars().first()


async def get_sleep_overview(
    session: AsyncSession,
    user_id: UUID,
    tz: tzinfo,
    *,
    now: datetime | None = None,
) -> tuple[SleepStats, list[SleepDay]]:
    now = now or local_now(tz)
    result = await session.execute(
        select(SleepLog)
        .where(SleepLog.user_id == user_id, SleepLog.logged_at >= _window_start(now, tz))
        .order_by(SleepLog.logged_at)
    )
    stats, days = summarise_sleep(result.scalars().all(), now, tz)
    # Last markers may predate the weekly window.
    if stats.last_wake is None:
        marker = await _latest_sleep_marker(session, user_id, SleepLogKind.WAKE)
        stats.last_wake = marker.logged_at if marker else None
    if stats.last_sleep is None:
        marker = await _latest_sleep_marker(session, user_id, SleepLogKind.SLEEP)
        stats.last_sleep = marker.logged_at if marker else None
    return stats, days


async def log_water(session: AsyncSession, payload: WaterLogCreate) -> WaterLog:
    log = WaterLog(user_id=payload.user_id, amount_ml=payload.amount_ml)
    session.add(log)
    await session.commit()
    await session.refresh(log)
    return log


async def get_water_overview(
    session: AsyncSession,
    user_id: UUID,
    tz: tzinfo,
    goal_ml: int,
    *,
    now: datetime | None = None,
) -> tuple[WaterStats, list[WaterDay]]:
    now = now or local_now(tz)
    result = await session.execute(
        select(WaterLog).where(
            WaterLog.user_id == user_id, WaterLog.logged_at >= _window_start(now, tz)
        )
    )
    return summarise_water(result.scalars().all(), now, tz, goal_ml)
