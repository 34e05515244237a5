"""Card builders.

Every function here is pure: it takes already-fetched aggregates plus a
:class:`CardTheme` and returns the ``(text, keyboard)`` pair that the screens
hand to the transport. Texts are HTML.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from decimal import Decimal
from html import escape
from typing import Optional, Sequence

from telegram import InlineKeyboardMarkup

from ..models.event import EventStatus
from ..models.finance import TransactionType
from ..schemas.event import EventRead
from ..schemas.finance import (
    CategoryRead,
    FinancialTransactionRead,
    FixedBillRead,
    GoalRead,
    MonthSummary,
)
from ..schemas.health import SleepDay, SleepStats, WaterDay, WaterStats
from .helpers import (
    day_name,
    format_clock,
    format_currency,
    format_date,
    format_duration,
    format_time_only,
)
from .transport import build_keyboard

Card = tuple[str, Optional[InlineKeyboardMarkup]]

STATEMENT_PREFIX = "fin_extrato:"
STATEMENT_ROWS = 8
REPORT_CATEGORIES = 6
UPCOMING_BILL_DAYS = 7


@dataclass(frozen=True)
class CardTheme:
    separator: str = "─────────────────────"
    progress_filled: str = "🟦"
    progress_empty: str = "▪️"
    progress_width: int = 10
    bar_filled: str = "█"
    bar_empty: str = "░"
    sleep_bar_width: int = 8
    currency: str = "BRL"

    def progress(self, percent: int) -> str:
        capped = max(0, min(percent, 100))
        filled = round(capped / 100 * self.progress_width)
        return self.progress_filled * filled + self.progress_empty * (self.progress_width - filled)

    def bar(self, value: float, maximum: float, width: int) -> str:
        filled = 0 if maximum <= 0 else min(round(value / maximum * width), width)
        return self.bar_filled * filled + self.bar_empty * (width - filled)

    def money(self, amount) -> str:
        return format_currency(amount, self.currency)


DEFAULT_THEME = CardTheme()

HOME_BUTTON = ("↩️ Back to Hub", "hub")
FINANCES_BUTTON = ("↩️ Back", "finances")


def greeting(hour: int) -> str:
    if 5 <= hour < 12:
        return "Good morning"
    if 12 <= hour < 18:
        return "Good afternoon"
    return "Good evening"


def status_emoji(percent: int) -> str:
    if percent >= 100:
        return "✅"
    if percent >= 75:
        return "🔥"
    if percent >= 50:
        return "💪"
    return "⚡"


def sleep_quality(hours: float) -> str:
    if 7 <= hours <= 9:
        return "😊"
    if 6 <= hours < 7:
        return "😐"
    if hours > 9:
        return "😴"
    return "😫"


def average_emoji(hours: float) -> str:
    if hours >= 7:
        return "✅"
    if hours >= 6:
        return "⚠️"
    return "❌"


def _month_label(month: int, year: int) -> str:
    return f"{calendar.month_name[month]} {year}"


def _hub_body(name: str, now: datetime, sleep: SleepStats, water: WaterStats, theme: CardTheme, tz: tzinfo) -> str:
    lines = [
        "<b>🧠 ELITE ASSISTANT</b>",
        theme.separator,
        "",
        f"{greeting(now.hour)}, {escape(name)}!",
        f"🗓 <i>{now.strftime('%A, %d %B')}</i>",
        "",
        theme.separator,
        "<b>⚡ TODAY</b>",
        theme.separator,
    ]
    if sleep.last_wake:
        lines.append(f"☀️ Woke up at <b>{format_time_only(sleep.last_wake, tz)}</b>")
    if sleep.today_sleep_hours:
        lines.append(f"😴 Slept for <b>{format_duration(round(sleep.today_sleep_hours * 60))}</b>")
    lines.extend(
        [
            "",
            "💧 <b>Hydration</b>",
            f"{theme.progress(water.percent_complete)} {water.percent_complete}%",
            f"<b>{water.today_ml}ml</b> / {water.goal_ml}ml {status_emoji(water.percent_complete)}",
        ]
    )
    if water.remaining > 0:
        lines.append(f"<i>🎯 {water.remaining}ml to go</i>")
    else:
        lines.append("<i>💪 Goal reached!</i>")
    lines.extend(["", theme.separator])
    return "\n".join(lines)


def hub_card(
    name: str,
    now: datetime,
    sleep: SleepStats,
    water: WaterStats,
    tz: tzinfo,
    theme: CardTheme = DEFAULT_THEME,
) -> Card:
    keyboard = build_keyboard(
        [
            [("⏰ Reminders", "reminders"), ("🌙 Going to sleep", "good_night")],
            [("💧 +250ml", "water_250"), ("💧 +500ml", "water_500"), ("💧 +1L", "water_1000")],
            [("📅 Create event", "create_event")],
            [("── 📂 MODULES ──", "show_modules")],
        ]
    )
    return _hub_body(name, now, sleep, water, theme, tz), keyboard


def modules_card(
    name: str,
    now: datetime,
    sleep: SleepStats,
    water: WaterStats,
    tz: tzinfo,
    theme: CardTheme = DEFAULT_THEME,
) -> Card:
    text = _hub_body(name, now, sleep, water, theme, tz) + "\n\n<b>📂 MODULES</b>"
    keyboard = build_keyboard(
        [
            [("💪 Health", "health")],
            [("📚 Studies", "studies"), ("💰 Finances", "finances")],
            [("↩️ Back", "hub")],
        ]
    )
    return text, keyboard


def placeholder_card(
    title: str, message: str, back: tuple[str, str] = HOME_BUTTON, theme: CardTheme = DEFAULT_THEME
) -> Card:
    text = f"<b>{title}</b>\n{theme.separator}\n\n🚧 <i>{message}</i>\n\n{theme.separator}"
    return text, build_keyboard([[back]])


# Health


def health_card(sleep: SleepStats, water: WaterStats, tz: tzinfo, theme: CardTheme = DEFAULT_THEME) -> Card:
    lines = ["<b>💪 HEALTH</b>", theme.separator, "", "😴 <b>SLEEP</b>"]
    if sleep.today_sleep_hours:
        lines.append(f"⏱️ Slept <b>{format_duration(round(sleep.today_sleep_hours * 60))}</b> last night")
    else:
        lines.append("⏱️ <i>No sleep data yet</i>")
    if sleep.last_wake:
        lines.append(f"☀️ Woke up at <b>{format_time_only(sleep.last_wake, tz)}</b>")
    if sleep.avg_hours:
        lines.append(f"📊 Weekly average: <b>{sleep.avg_hours:.1f}h</b> {average_emoji(sleep.avg_hours)}")
    lines.extend(
        [
            "",
            "💧 <b>HYDRATION</b>",
            f"{theme.progress(water.percent_complete)} {status_emoji(water.percent_complete)}",
            f"<b>{water.today_ml}ml</b> / {water.goal_ml}ml ({water.percent_complete}%)",
            "",
            theme.separator,
        ]
    )
    keyboard = build_keyboard(
        [
            [("🛏️ Sleep", "health_sleep"), ("💧 Water", "health_water")],
            [("🏃 Activity", "health_activity"), ("📊 Stats", "health_stats")],
            [HOME_BUTTON],
        ]
    )
    return "\n".join(lines), keyboard


def sleep_insight(sleep: SleepStats, days: Sequence[SleepDay]) -> str:
    if not sleep.avg_hours:
        return "💡 Use the ☀️ and 🌙 buttons to log your sleep automatically!"
    avg = sleep.avg_hours
    if 7 <= avg <= 8:
        return "💚 Great! Your average is in the ideal 7-8h range. Keep this routine."
    if avg < 6:
        return "⚠️ Your average is below the ideal. Try going to bed earlier tonight."
    if avg > 9:
        return "💤 You are sleeping a lot. This can point to accumulated tiredness."
    logged = [day for day in days if day.hours is not None]
    if logged:
        worst = min(logged, key=lambda day: day.hours)
        if worst.hours < 5:
            return (
                f"😴 {day_name(worst.date)} was rough with only "
                f"{format_duration(round(worst.hours * 60))}. Prioritise rest!"
            )
    return "💡 Keep a consistent schedule: sleep and wake at the same times."


def sleep_card(
    sleep: SleepStats, days: Sequence[SleepDay], tz: tzinfo, theme: CardTheme = DEFAULT_THEME
) -> Card:
    lines = ["<b>🛏️ SLEEP</b>", theme.separator, "", "📅 <b>LAST 7 DAYS</b>"]
    for day in days:
        label = f"<code>{day_name(day.date)}</code>"
        if day.hours:
            bar = theme.bar(day.hours, 10, theme.sleep_bar_width)
            lines.append(f"{label} {bar} <b>{day.hours:.1f}h</b> {sleep_quality(day.hours)}")
        else:
            lines.append(f"{label} <i>no data</i>")
    lines.extend(["", "📊 <b>STATS</b>"])
    if sleep.avg_hours:
        lines.append(f"📈 Weekly average: <b>{sleep.avg_hours:.1f}h</b> {average_emoji(sleep.avg_hours)}")
    if sleep.last_wake:
        lines.append(f"☀️ Last wake-up: <b>{format_time_only(sleep.last_wake, tz)}</b>")
    if sleep.last_sleep:
        lines.append(f"🌙 Last bedtime: <b>{format_time_only(sleep.last_sleep, tz)}</b>")
    if sleep.today_sleep_hours:
        lines.append(
            f"😴 Last night: <b>{format_duration(round(sleep.today_sleep_hours * 60))}</b> "
            f"{sleep_quality(sleep.today_sleep_hours)}"
        )
    lines.extend(["", "💡 <b>INSIGHT</b>", f"<i>{sleep_insight(sleep, days)}</i>", "", theme.separator])
    keyboard = build_keyboard(
        [
            [("☀️ I woke up", "good_morning"), ("🌙 Going to sleep", "good_night")],
            [("↩️ Back to Health", "health")],
            [("🏠 Hub", "hub")],
        ]
    )
    return "\n".join(lines), keyboard


def water_card(water: WaterStats, days: Sequence[WaterDay], theme: CardTheme = DEFAULT_THEME) -> Card:
    lines = [
        "<b>💧 HYDRATION</b>",
        theme.separator,
        "",
        f"{theme.progress(water.percent_complete)} {water.percent_complete}%",
        f"<b>{water.today_ml}ml</b> / {water.goal_ml}ml {status_emoji(water.percent_complete)}",
    ]
    if water.remaining > 0:
        lines.append(f"<i>🎯 {water.remaining}ml to go</i>")
    else:
        lines.append("<i>✨ Goal reached!</i>")
    lines.extend(["", "📅 <b>LAST 7 DAYS</b>"])
    for day in days:
        percent = round(day.total_ml / water.goal_ml * 100) if water.goal_ml else 0
        mark = "✅" if percent >= 100 else ""
        lines.append(f"<code>{day_name(day.date)}</code> {theme.progress(percent)} {day.total_ml}ml {mark}".rstrip())
    lines.extend(["", theme.separator])
    keyboard = build_keyboard(
        [
            [("💧 +250ml", "water_250"), ("💧 +500ml", "water_500"), ("💧 +1L", "water_1000")],
            [("↩️ Back to Health", "health")],
            [("🏠 Hub", "hub")],
        ]
    )
    return "\n".join(lines), keyboard


def water_quick_card(water: WaterStats, theme: CardTheme = DEFAULT_THEME) -> Card:
    text = (
        f"<b>💧 LOG WATER</b>\n{theme.separator}\n\n"
        f"Today: <b>{water.today_ml}ml</b> / {water.goal_ml}ml\n\n"
        f"<i>How much did you drink?</i>\n\n{theme.separator}"
    )
    keyboard = build_keyboard(
        [
            [("💧 250ml", "water_250"), ("💧 500ml", "water_500"), ("💧 1L", "water_1000")],
            [("↩️ Back", "health_water")],
        ]
    )
    return text, keyboard


def health_stats_card(
    sleep: SleepStats,
    sleep_days: Sequence[SleepDay],
    water: WaterStats,
    water_days: Sequence[WaterDay],
    theme: CardTheme = DEFAULT_THEME,
) -> Card:
    slept = [day.hours for day in sleep_days if day.hours]
    water_totals = [day.total_ml for day in water_days]
    goal_days = sum(1 for total in water_totals if total >= water.goal_ml)
    lines = ["<b>📊 HEALTH STATS</b>", theme.separator, "", "😴 <b>Sleep (7 days)</b>"]
    if slept:
        lines.append(f"Average: <b>{sum(slept) / len(slept):.1f}h</b> over {len(slept)} nights")
        lines.append(f"Best: <b>{max(slept):.1f}h</b>  Worst: <b>{min(slept):.1f}h</b>")
    else:
        lines.append("<i>No sleep data yet</i>")
    lines.extend(["", "💧 <b>Water (7 days)</b>"])
    if water_totals:
        lines.append(f"Daily average: <b>{round(sum(water_totals) / len(water_totals))}ml</b>")
    lines.append(f"Goal reached on <b>{goal_days}</b> of {len(water_totals)} days")
    lines.extend(["", theme.separator])
    return "\n".join(lines), build_keyboard([[("↩️ Back to Health", "health")]])


def good_morning_card(
    name: str,
    woke_at: datetime,
    slept_minutes: Optional[int],
    tz: tzinfo,
    delay_seconds: float,
    theme: CardTheme = DEFAULT_THEME,
) -> Card:
    lines = [f"<b>☀️ GOOD MORNING, {escape(name.upper())}!</b>", theme.separator, ""]
    lines.append(f"⏰ Woke up at <b>{format_time_only(woke_at, tz)}</b>")
    lines.append("")
    if slept_minutes is None:
        lines.append("<i>✨ Your day has started! Logged.</i>")
    else:
        lines.append(f"😴 Slept <b>{format_duration(slept_minutes)}</b>")
        lines.append("")
        if slept_minutes < 360:
            lines.append("<i>⚠️ Not much sleep. Take it easy today!</i>")
        elif 420 <= slept_minutes <= 540:
            lines.append("<i>✅ Ideal night! You are on the right track.</i>")
        elif slept_minutes > 540:
            lines.append("<i>💤 Plenty of rest! Energy renewed!</i>")
        else:
            lines.append("<i>😊 Good rest! Let's have a productive day!</i>")
    lines.extend(["", theme.separator, f"<i>Back to the Hub in {delay_seconds:g} seconds...</i>"])
    return "\n".join(lines), None


def good_night_card(
    name: str,
    slept_at: datetime,
    awake_minutes: Optional[int],
    tz: tzinfo,
    theme: CardTheme = DEFAULT_THEME,
) -> Card:
    local = slept_at.astimezone(tz)
    lines = [f"<b>🌙 GOOD NIGHT, {escape(name.upper())}!</b>", theme.separator, ""]
    lines.append(f"⏰ Going to sleep at <b>{local.strftime('%H:%M')}</b>")
    if awake_minutes is not None:
        lines.append(f"☀️ Day length: <b>{format_duration(awake_minutes)}</b>")
    lines.append("")
    if 5 <= local.hour < 22:
        lines.append("<i>👏 Excellent! Sleeping early is a great habit!</i>")
    elif local.hour >= 22:
        lines.append("<i>😊 Good time to rest. Sweet dreams!</i>")
    else:
        lines.append("<i>😴 It's late! Rest well and recover!</i>")
    lines.extend(["", "💤 <b>Logged!</b>", "", theme.separator, "<i>See you tomorrow! 🌟</i>"])
    return "\n".join(lines), build_keyboard([[HOME_BUTTON]])


# Finances


def upcoming_bills(bills: Sequence[FixedBillRead], today: date) -> list[FixedBillRead]:
    return [bill for bill in bills if 0 <= bill.due_day - today.day <= UPCOMING_BILL_DAYS][:3]


def _bill_amount(bill: FixedBillRead) -> Optional[Decimal]:
    if bill.month_value is not None:
        return bill.month_value.amount
    if bill.is_variable:
        return None
    return bill.amount or bill.estimated_amount or Decimal("0")


def finances_card(
    summary: MonthSummary,
    bills: Sequence[FixedBillRead],
    today: date,
    theme: CardTheme = DEFAULT_THEME,
) -> Card:
    lines = [
        "<b>💰 FINANCES</b>",
        theme.separator,
        "",
        f"<b>📊 MONTH SUMMARY</b> ({calendar.month_name[summary.month]})",
        "",
        f"💵 Balance: <b>{theme.money(summary.balance)}</b>",
        "",
        f"📥 Income: {theme.money(summary.total_income)}",
        f"📤 Expenses: {theme.money(summary.total_expense)}",
    ]
    upcoming = upcoming_bills(bills, today)
    if upcoming:
        lines.extend(["", "<b>⚠️ UPCOMING BILLS</b>"])
        for bill in upcoming:
            amount = _bill_amount(bill)
            value = theme.money(amount) if amount is not None else "<i>amount not set</i>"
            lines.append(f"   📅 {bill.due_day:02d}/{summary.month:02d} - {escape(bill.emoji)} {escape(bill.name)}: {value}")
    lines.extend(["", theme.separator])
    keyboard = build_keyboard(
        [
            [("📥 Income", "fin_entrada"), ("📤 Expense", "fin_saida")],
            [("📆 Fixed bills", "fin_bills"), ("🏷️ Categories", "fin_categories")],
            [("📊 Statement", "fin_extrato"), ("📈 Reports", "fin_reports")],
            [("🎯 Goals", "fin_goals")],
            [HOME_BUTTON],
        ]
    )
    return "\n".join(lines), keyboard


def bills_card(bills: Sequence[FixedBillRead], month: int, theme: CardTheme = DEFAULT_THEME) -> Card:
    lines = ["<b>📆 FIXED BILLS</b>", theme.separator, "", "<b>📌 THIS MONTH</b>", ""]
    total = paid = pending = Decimal("0")
    if not bills:
        lines.append("<i>No bills registered.</i>")
    for bill in bills:
        is_paid = bill.month_value is not None and bill.month_value.is_paid
        amount = _bill_amount(bill)
        if amount is None:
            value = "<i>amount not set</i>"
        else:
            value = theme.money(amount)
            total += amount
            if is_paid:
                paid += amount
            else:
                pending += amount
        status = "✅" if is_paid else "⏳"
        lines.append(f"{status} {bill.due_day:02d}/{month:02d} - {escape(bill.emoji)} {escape(bill.name)}: {value}")
    lines.extend(
        [
            "",
            f"<b>📊 Total:</b> {theme.money(total)}",
            f"<b>✅ Paid:</b> {theme.money(paid)}",
            f"<b>⏳ Pending:</b> {theme.money(pending)}",
            "",
            theme.separator,
        ]
    )
    keyboard = build_keyboard([[("➕ Add", "bill_add"), ("✏️ Edit", "bill_edit")], [FINANCES_BUTTON]])
    return "\n".join(lines), keyboard


def categories_card(categories: Sequence[CategoryRead], theme: CardTheme = DEFAULT_THEME) -> Card:
    lines = ["<b>🏷️ CATEGORIES</b>", theme.separator]
    for label, category_type in (("📥 INCOME", TransactionType.INCOME), ("📤 EXPENSES", TransactionType.EXPENSE)):
        lines.extend(["", f"<b>{label}</b>"])
        matching = [category for category in categories if category.category_type == category_type]
        if not matching:
            lines.append("   <i>No categories</i>")
        for category in matching:
            lines.append(f"   {escape(category.emoji)} {escape(category.name)}")
    lines.extend(["", theme.separator])
    keyboard = build_keyboard([[("➕ Add", "cat_add"), ("✏️ Edit", "cat_edit")], [FINANCES_BUTTON]])
    return "\n".join(lines), keyboard


def statement_token(month: int, year: int) -> str:
    return f"{STATEMENT_PREFIX}{month}:{year}"


def shift_month(month: int, year: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index % 12 + 1, index // 12


def _signed(transaction: FinancialTransactionRead) -> tuple[str, str]:
    if transaction.transaction_type == TransactionType.INCOME:
        return "📥", "+"
    return "📤", "-"


def statement_card(
    transactions: Sequence[FinancialTransactionRead],
    summary: MonthSummary,
    theme: CardTheme = DEFAULT_THEME,
) -> Card:
    month, year = summary.month, summary.year
    lines = ["<b>📊 STATEMENT</b>", theme.separator, "", f"<b>📅 {_month_label(month, year).upper()}</b>", ""]
    if not transactions:
        lines.append("<i>No transactions recorded.</i>")
    for transaction in transactions[:STATEMENT_ROWS]:
        type_emoji, sign = _signed(transaction)
        category = escape(transaction.category_name or "Other")
        lines.append(
            f"{transaction.occurred_on.strftime('%d/%m')} {type_emoji} "
            f"{escape(transaction.category_emoji or '📦')} {category} {sign}{theme.money(transaction.amount)}"
        )
    if len(transactions) > STATEMENT_ROWS:
        lines.append(f"<i>... and {len(transactions) - STATEMENT_ROWS} more</i>")
    lines.extend(
        [
            "",
            theme.separator,
            f"📥 Income: {theme.money(summary.total_income)}",
            f"📤 Expenses: {theme.money(summary.total_expense)}",
            f"💰 Balance: {theme.money(summary.balance)}",
            "",
            theme.separator,
        ]
    )
    prev_month, prev_year = shift_month(month, year, -1)
    next_month, next_year = shift_month(month, year, 1)
    keyboard = build_keyboard(
        [
            [
                (f"◀️ {calendar.month_abbr[prev_month]}", statement_token(prev_month, prev_year)),
                (f"{calendar.month_abbr[next_month]} ▶️", statement_token(next_month, next_year)),
            ],
            [FINANCES_BUTTON],
        ]
    )
    return "\n".join(lines), keyboard


def goals_card(goals: Sequence[GoalRead], theme: CardTheme = DEFAULT_THEME) -> Card:
    lines = ["<b>🎯 FINANCIAL GOALS</b>", theme.separator, "", "<b>📌 ACTIVE GOALS</b>", ""]
    active = [goal for goal in goals if not goal.is_completed]
    if not active:
        lines.append("<i>No goals yet.</i>")
    for position, goal in enumerate(active, start=1):
        percent = round(goal.current_amount / goal.target_amount * 100) if goal.target_amount else 0
        lines.append(f"{position}. {escape(goal.name)}")
        lines.append(f"   {theme.progress(percent)} {percent}%")
        lines.append(f"   {theme.money(goal.current_amount)} / {theme.money(goal.target_amount)}")
        lines.append("")
    lines.append(theme.separator)
    keyboard = build_keyboard([[("➕ New goal", "goal_add")], [FINANCES_BUTTON]])
    return "\n".join(lines), keyboard


def expenses_by_category(
    transactions: Sequence[FinancialTransactionRead],
) -> list[tuple[str, str, Decimal]]:
    totals: dict[str, Decimal] = defaultdict(Decimal)
    emojis: dict[str, str] = {}
    for transaction in transactions:
        if transaction.transaction_type != TransactionType.EXPENSE:
            continue
        name = transaction.category_name or "Other"
        totals[name] += transaction.amount
        emojis.setdefault(name, transaction.category_emoji or "📦")
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [(emojis[name], name, total) for name, total in ranked[:REPORT_CATEGORIES]]


def reports_card(
    transactions: Sequence[FinancialTransactionRead],
    month: int,
    year: int,
    theme: CardTheme = DEFAULT_THEME,
) -> Card:
    lines = [
        "<b>📈 REPORTS</b>",
        theme.separator,
        "",
        f"<b>📅 {_month_label(month, year).upper()}</b>",
        "",
        "<b>📊 EXPENSES BY CATEGORY</b>",
        "",
    ]
    ranked = expenses_by_category(transactions)
    if not ranked:
        lines.append("<i>No expenses recorded.</i>")
    else:
        top = ranked[0][2]
        for emoji, name, total in ranked:
            bar = theme.bar(float(total), float(top), theme.progress_width)
            lines.append(f"{escape(emoji)} {escape(name)}")
            lines.append(f"   {bar} {theme.money(total)}")
    lines.extend(["", theme.separator])
    return "\n".join(lines), build_keyboard([[FINANCES_BUTTON]])


# Events


def _event_lines(draft: EventRead) -> list[str]:
    pending = "<i>pending</i>"
    lines = [
        f"📝 Title: <b>{escape(draft.title)}</b>" if draft.title else f"📝 Title: {pending}",
        f"📅 Date: <b>{format_date(draft.event_date)}</b>" if draft.event_date else f"📅 Date: {pending}",
    ]
    if draft.all_day:
        lines.append("🕐 <b>All day</b>")
    else:
        start = f"<b>{format_clock(draft.start_time)}</b>" if draft.start_time else pending
        end = f"<b>{format_clock(draft.end_time)}</b>" if draft.end_time else pending
        lines.append(f"🟢 Start: {start}")
        lines.append(f"🔴 End: {end}")
    if draft.location:
        lines.append(f"📍 Location: <b>{escape(draft.location)}</b>")
    elif not draft.all_day:
        lines.append(f"📍 Location: {pending}")
    return lines


def event_progress_card(draft: EventRead, theme: CardTheme = DEFAULT_THEME) -> Card:
    text = "\n".join(
        ["<b>📅 NEW EVENT</b>", theme.separator, "", *_event_lines(draft), "", "<i>Reply to the prompt below.</i>"]
    )
    return text, build_keyboard([[("❌ Cancel", "event_cancel")]])


def event_review_card(draft: EventRead, theme: CardTheme = DEFAULT_THEME) -> Card:
    text = "\n".join(
        ["<b>📅 REVIEW EVENT</b>", theme.separator, "", *_event_lines(draft), "", theme.separator]
    )
    keyboard = build_keyboard(
        [
            [("✅ Confirm", "event_confirm"), ("✏️ Edit", "event_edit")],
            [("❌ Cancel", "event_cancel")],
        ]
    )
    return text, keyboard


def event_edit_menu_card(draft: EventRead, theme: CardTheme = DEFAULT_THEME) -> Card:
    text = "\n".join(
        ["<b>✏️ EDIT EVENT</b>", theme.separator, "", *_event_lines(draft), "", "<i>What do you want to change?</i>"]
    )
    rows: list[list[tuple[str, str]]] = [[("📝 Title", "edit_title"), ("📅 Date", "edit_date")]]
    if not draft.all_day:
        rows.append([("🟢 Start", "edit_start"), ("🔴 End", "edit_end")])
    rows.append([("📍 Location", "edit_location")])
    rows.append([("🕐 Timed" if draft.all_day else "🕐 All day", "event_all_day")])
    rows.append([("↩️ Done", "event_exit")])
    return text, build_keyboard(rows)


def all_day_question_card(draft: EventRead, theme: CardTheme = DEFAULT_THEME) -> Card:
    text = "\n".join(
        ["<b>📅 NEW EVENT</b>", theme.separator, "", *_event_lines(draft)[:2], "", "<b>Is it an all-day event?</b>"]
    )
    keyboard = build_keyboard(
        [
            [("✅ All day", "event_allday_yes"), ("🕐 Set times", "event_allday_no")],
            [("❌ Cancel", "event_cancel")],
        ]
    )
    return text, keyboard


def event_closed_card(draft: EventRead, theme: CardTheme = DEFAULT_THEME) -> Card:
    if draft.status == EventStatus.CONFIRMED:
        header = "<b>✅ EVENT SAVED</b>"
        body = _event_lines(draft)
    else:
        header = "<b>🗑️ EVENT DISCARDED</b>"
        body = ["<i>The draft was cancelled.</i>"]
    text = "\n".join([header, theme.separator, "", *body, "", theme.separator])
    return text, build_keyboard([[HOME_BUTTON]])
