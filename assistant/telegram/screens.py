from __future__ import annotations

import logging
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Any, Optional

from telegram import Message

from ..config import Settings
from ..schemas.finance import (
    CategoryRead,
    FinancialTransactionRead,
    FixedBillRead,
    GoalRead,
    MonthSummary,
)
from ..schemas.health import SleepDay, SleepLogRead, SleepStats, WaterDay, WaterStats
from ..services.health import MAX_SESSION_HOURS
from ..utils.timezone import local_now, resolve_timezone
from . import cards
from .api_client import AssistantApiClient
from .cards import Card, CardTheme
from .session import schedule_rerender
from .transport import TelegramTransport

logger = logging.getLogger(__name__)


@dataclass
class ScreenContext:
    """Everything a handler needs to act for one user in one chat."""

    api: AssistantApiClient
    transport: TelegramTransport
    settings: Settings
    user: dict[str, Any]
    chat_id: int
    user_data: MutableMapping[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> str:
        return str(self.user["id"])

    @property
    def display_name(self) -> str:
        return self.user.get("display_name") or self.settings.default_display_name

    @property
    def tz(self) -> tzinfo:
        return resolve_timezone(self.settings.timezone)

    @property
    def theme(self) -> CardTheme:
        return CardTheme(currency=self.settings.currency)

    def now(self) -> datetime:
        return local_now(self.tz)

    async def show(self, message_id: int, card: Card) -> None:
        text, keyboard = card
        await self.transport.edit_message(self.chat_id, message_id, text, reply_markup=keyboard)


async def _sleep_overview(ctx: ScreenContext) -> tuple[SleepStats, list[SleepDay]]:
    stats = SleepStats.model_validate(await ctx.api.sleep_stats(ctx.user_id))
    days = [SleepDay.model_validate(day) for day in await ctx.api.sleep_weekly(ctx.user_id)]
    return stats, days


async def _water_overview(ctx: ScreenContext) -> tuple[WaterStats, list[WaterDay]]:
    stats = WaterStats.model_validate(await ctx.api.water_stats(ctx.user_id))
    days = [WaterDay.model_validate(day) for day in await ctx.api.water_weekly(ctx.user_id)]
    return stats, days


async def _hub(ctx: ScreenContext, builder=cards.hub_card) -> Card:
    sleep = SleepStats.model_validate(await ctx.api.sleep_stats(ctx.user_id))
    water = WaterStats.model_validate(await ctx.api.water_stats(ctx.user_id))
    return builder(ctx.display_name, ctx.now(), sleep, water, ctx.tz, ctx.theme)


# Hub


async def send_hub(ctx: ScreenContext) -> Optional[Message]:
    text, keyboard = await _hub(ctx)
    return await ctx.transport.send_message(ctx.chat_id, text, reply_markup=keyboard)


async def show_hub(ctx: ScreenContext, message_id: int) -> None:
    await ctx.show(message_id, await _hub(ctx))


async def show_modules(ctx: ScreenContext, message_id: int) -> None:
    await ctx.show(message_id, await _hub(ctx, cards.modules_card))


async def show_placeholder(
    ctx: ScreenContext,
    message_id: int,
    *,
    title: str,
    message: str,
    back: tuple[str, str] = cards.HOME_BUTTON,
) -> None:
    await ctx.show(message_id, cards.placeholder_card(title, message, back, ctx.theme))


async def noop(ctx: ScreenContext, message_id: int) -> None:
    return None


# Health


async def show_health(ctx: ScreenContext, message_id: int) -> None:
    sleep = SleepStats.model_validate(await ctx.api.sleep_stats(ctx.user_id))
    water = WaterStats.model_validate(await ctx.api.water_stats(ctx.user_id))
    await ctx.show(message_id, cards.health_card(sleep, water, ctx.tz, ctx.theme))


async def show_sleep(ctx: ScreenContext, message_id: int) -> None:
    stats, days = await _sleep_overview(ctx)
    await ctx.show(message_id, cards.sleep_card(stats, days, ctx.tz, ctx.theme))


async def show_water(ctx: ScreenContext, message_id: int) -> None:
    stats, days = await _water_overview(ctx)
    await ctx.show(message_id, cards.water_card(stats, days, ctx.theme))


async def show_water_quick(ctx: ScreenContext, message_id: int) -> None:
    stats = WaterStats.model_validate(await ctx.api.water_stats(ctx.user_id))
    await ctx.show(message_id, cards.water_quick_card(stats, ctx.theme))


async def show_health_stats(ctx: ScreenContext, message_id: int) -> None:
    sleep, sleep_days = await _sleep_overview(ctx)
    water, water_days = await _water_overview(ctx)
    await ctx.show(message_id, cards.health_stats_card(sleep, sleep_days, water, water_days, ctx.theme))


async def log_water_amount(ctx: ScreenContext, message_id: int, *, amount_ml: int) -> None:
    await ctx.api.log_water(ctx.user_id, amount_ml)
    logger.info("Logged %sml of water for user %s", amount_ml, ctx.user_id)
    await show_water(ctx, message_id)


async def good_morning(ctx: ScreenContext, message_id: int) -> None:
    log = SleepLogRead.model_validate(await ctx.api.log_sleep(ctx.user_id, "wake"))
    stats = SleepStats.model_validate(await ctx.api.sleep_stats(ctx.user_id))
    slept_minutes = None
    if stats.last_sleep and stats.last_sleep < log.logged_at:
        elapsed = log.logged_at - stats.last_sleep
        if elapsed <= timedelta(hours=MAX_SESSION_HOURS):
            slept_minutes = round(elapsed.total_seconds() / 60)
    delay = ctx.settings.home_rerender_delay_seconds
    await ctx.show(
        message_id,
        cards.good_morning_card(ctx.display_name, log.logged_at, slept_minutes, ctx.tz, delay, ctx.theme),
    )

    async def _back_to_hub() -> None:
        await show_hub(ctx, message_id)

    schedule_rerender(ctx.user_data, delay, _back_to_hub)


async def good_night(ctx: ScreenContext, message_id: int) -> None:
    log = SleepLogRead.model_validate(await ctx.api.log_sleep(ctx.user_id, "sleep"))
    stats = SleepStats.model_validate(await ctx.api.sleep_stats(ctx.user_id))
    awake_minutes = None
    if stats.last_wake:
        same_day = stats.last_wake.astimezone(ctx.tz).date() == log.logged_at.astimezone(ctx.tz).date()
        if same_day and stats.last_wake < log.logged_at:
            awake_minutes = round((log.logged_at - stats.last_wake).total_seconds() / 60)
    await ctx.show(
        message_id,
        cards.good_night_card(ctx.display_name, log.logged_at, awake_minutes, ctx.tz, ctx.theme),
    )


# Finances


async def _month_data(
    ctx: ScreenContext, month: int, year: int
) -> tuple[MonthSummary, list[FinancialTransactionRead]]:
    summary = MonthSummary.model_validate(await ctx.api.month_summary(ctx.user_id, month=month, year=year))
    transactions = [
        FinancialTransactionRead.model_validate(item)
        for item in await ctx.api.list_transactions(ctx.user_id, month=month, year=year)
    ]
    return summary, transactions


async def _bills(ctx: ScreenContext, month: int, year: int) -> list[FixedBillRead]:
    return [
        FixedBillRead.model_validate(item)
        for item in await ctx.api.list_bills(ctx.user_id, month=month, year=year)
    ]


async def show_finances(ctx: ScreenContext, message_id: int) -> None:
    today = ctx.now().date()
    summary = MonthSummary.model_validate(
        await ctx.api.month_summary(ctx.user_id, month=today.month, year=today.year)
    )
    bills = await _bills(ctx, today.month, today.year)
    await ctx.show(message_id, cards.finances_card(summary, bills, today, ctx.theme))


async def show_bills(ctx: ScreenContext, message_id: int) -> None:
    today = ctx.now().date()
    bills = await _bills(ctx, today.month, today.year)
    await ctx.show(message_id, cards.bills_card(bills, today.month, ctx.theme))


async def show_categories(ctx: ScreenContext, message_id: int) -> None:
    categories = [CategoryRead.model_validate(item) for item in await ctx.api.list_categories(ctx.user_id)]
    await ctx.show(message_id, cards.categories_card(categories, ctx.theme))


async def show_statement(
    ctx: ScreenContext, message_id: int, month: Optional[int] = None, year: Optional[int] = None
) -> None:
    today = ctx.now().date()
    month = month or today.month
    year = year or today.year
    summary, transactions = await _month_data(ctx, month, year)
    await ctx.show(message_id, cards.statement_card(transactions, summary, ctx.theme))


def parse_statement_suffix(suffix: str) -> Optional[tuple[int, int]]:
    month_text, _, year_text = suffix.partition(":")
    if not (month_text.isdigit() and year_text.isdigit()):
        return None
    month, year = int(month_text), int(year_text)
    if not 1 <= month <= 12 or not 2000 <= year <= 2100:
        return None
    return month, year


async def show_statement_page(ctx: ScreenContext, message_id: int, suffix: str) -> None:
    period = parse_statement_suffix(suffix)
    if period is None:
        logger.info("Ignoring malformed statement token suffix %r", suffix)
        return
    await show_statement(ctx, message_id, *period)


async def show_goals(ctx: ScreenContext, message_id: int) -> None:
    goals = [GoalRead.model_validate(item) for item in await ctx.api.list_goals(ctx.user_id)]
    await ctx.show(message_id, cards.goals_card(goals, ctx.theme))


async def show_reports(ctx: ScreenContext, message_id: int) -> None:
    today = ctx.now().date()
    _summary, transactions = await _month_data(ctx, today.month, today.year)
    await ctx.show(message_id, cards.reports_card(transactions, today.month, today.year, ctx.theme))

