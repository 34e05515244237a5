from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal
from uuid import UUID, uuid4
from unittest import TestCase

from assistant.schemas.event import EventRead
from assistant.schemas.finance import CategoryRead, FinancialTransactionRead, FixedBillRead, MonthSummary
from assistant.schemas.health import SleepStats, WaterStats
from assistant.telegram import cards
from assistant.telegram.cards import CardTheme
from assistant.telegram.helpers import format_currency, format_duration, parse_date, parse_time


def _tokens(card: cards.Card) -> list[str]:
    _text, keyboard = card
    return [button.callback_data for row in keyboard.inline_keyboard for button in row]


def _event(**fields) -> EventRead:
    payload = {"id": uuid4(), "user_id": UUID(int=1), "status": "draft", **fields}
    return EventRead.model_validate(payload)


class HelperParsingTests(TestCase):
    def test_parse_date_is_strict(self) -> None:
        self.assertEqual(parse_date("29/02/2028"), date(2028, 2, 29))
        self.assertEqual(parse_date(" 01/12/2026 "), date(2026, 12, 1))
        for value in ("29/02/2026", "1/12/2026", "01-12-2026", "01/13/2026", "tomorrow", ""):
            self.assertIsNone(parse_date(value), value)

    def test_parse_time_is_strict(self) -> None:
        self.assertEqual(parse_time("00:00"), time(0, 0))
        self.assertEqual(parse_time("23:59"), time(23, 59))
        for value in ("24:00", "12:60", "9:30", "0930", "noon"):
            self.assertIsNone(parse_time(value), value)

    def test_format_duration(self) -> None:
        self.assertEqual(format_duration(450), "7h30min")
        self.assertEqual(format_duration(420), "7h")
        self.assertEqual(format_duration(45), "45min")

    def test_format_currency(self) -> None:
        self.assertEqual(format_currency("1234.5", "BRL"), "R$ 1,234.50")
        self.assertEqual(format_currency(Decimal("-12"), "USD"), "-$ 12.00")
        self.assertEqual(format_currency("7", "IDR"), "7.00 IDR")


class ThemeTests(TestCase):
    def test_progress_is_capped(self) -> None:
        theme = CardTheme()
        self.assertEqual(theme.progress(50), "🟦" * 5 + "▪️" * 5)
        self.assertEqual(theme.progress(180), "🟦" * 10)
        self.assertEqual(theme.progress(-5), "▪️" * 10)

    def test_greeting_by_hour(self) -> None:
        self.assertEqual(cards.greeting(5), "Good morning")
        self.assertEqual(cards.greeting(12), "Good afternoon")
        self.assertEqual(cards.greeting(17), "Good afternoon")
        self.assertEqual(cards.greeting(18), "Good evening")
        self.assertEqual(cards.greeting(3), "Good evening")


class HubCardTests(TestCase):
    def test_hub_shows_hydration_and_escapes_name(self) -> None:
        now = datetime(2026, 2, 15, 9, 0, tzinfo=timezone.utc)
        water = WaterStats(today_ml=1000, goal_ml=4000, percent_complete=25, remaining=3000)

        text, keyboard = cards.hub_card("<Faris>", now, SleepStats(), water, timezone.utc)

        self.assertIn("Good morning, &lt;Faris&gt;!", text)
        self.assertIn("1000ml</b> / 4000ml", text)
        self.assertIn("3000ml to go", text)
        self.assertIn("create_event", _tokens((text, keyboard)))

    def test_good_morning_card_has_no_keyboard(self) -> None:
        woke_at = datetime(2026, 2, 15, 7, 15, tzinfo=timezone.utc)

        text, keyboard = cards.good_morning_card("Faris", woke_at, 330, timezone.utc, 2)

        self.assertIsNone(keyboard)
        self.assertIn("07:15", text)
        self.assertIn("5h30min", text)
        self.assertIn("Back to the Hub in 2 seconds", text)


class FinanceCardTests(TestCase):
    def test_statement_navigation_wraps_year(self) -> None:
        summary = MonthSummary(month=1, year=2026)

        tokens = _tokens(cards.statement_card([], summary))

        self.assertIn("fin_extrato:12:2025", tokens)
        self.assertIn("fin_extrato:2:2026", tokens)

    def test_statement_truncates_long_months(self) -> None:
        transactions = [
            FinancialTransactionRead(
                id=uuid4(),
                transaction_type="expense",
                amount=Decimal("10"),
                occurred_on=date(2026, 2, day),
                category_name="Food",
            )
            for day in range(1, 11)
        ]

        text, _keyboard = cards.statement_card(transactions, MonthSummary(month=2, year=2026))

        self.assertIn("... and 2 more", text)

    def test_variable_bill_without_value_is_not_set(self) -> None:
        bill = FixedBillRead(id=uuid4(), name="Power", emoji="⚡", is_variable=True, due_day=18)

        text, _keyboard = cards.finances_card(MonthSummary(month=2, year=2026), [bill], date(2026, 2, 15))

        self.assertIn("Power: <i>amount not set</i>", text)

    def test_emoji_fields_are_escaped(self) -> None:
        bill = FixedBillRead(id=uuid4(), name="Rent", emoji="<b", is_variable=False, due_day=18)
        category = CategoryRead(id=uuid4(), name="Food", emoji="<3", category_type="expense")

        finances_text, _ = cards.finances_card(MonthSummary(month=2, year=2026), [bill], date(2026, 2, 15))
        bills_text, _ = cards.bills_card([bill], 2)
        categories_text, _ = cards.categories_card([category])

        self.assertIn("&lt;b Rent", finances_text)
        self.assertIn("&lt;b Rent", bills_text)
        self.assertIn("&lt;3 Food", categories_text)
        self.assertNotIn("<3", categories_text)

    def test_expenses_ranked_by_category(self) -> None:
        def tx(amount: str, name: str, kind: str = "expense") -> FinancialTransactionRead:
            return FinancialTransactionRead(
                id=uuid4(),
                transaction_type=kind,
                amount=Decimal(amount),
                occurred_on=date(2026, 2, 1),
                category_name=name,
                category_emoji="📦",
            )

        ranked = cards.expenses_by_category(
            [tx("10", "Food"), tx("50", "Rent"), tx("15", "Food"), tx("999", "Salary", "income")]
        )

        self.assertEqual([(name, total) for _emoji, name, total in ranked], [("Rent", Decimal("50")), ("Food", Decimal("25"))])


class EventCardTests(TestCase):
    def test_edit_menu_hides_times_for_all_day_events(self) -> None:
        draft = _event(title="Holiday", event_date=date(2026, 12, 25), all_day=True)

        tokens = _tokens(cards.event_edit_menu_card(draft))

        self.assertNotIn("edit_start", tokens)
        self.assertNotIn("edit_end", tokens)
        self.assertIn("event_all_day", tokens)
        self.assertIn("event_exit", tokens)

    def test_review_card_offers_confirm_edit_cancel(self) -> None:
        draft = _event(
            title="Sync & plan",
            event_date=date(2026, 2, 15),
            all_day=False,
            start_time=time(14, 30),
            end_time=time(16),
            location="Office",
        )

        text, keyboard = cards.event_review_card(draft)

        self.assertIn("Sync &amp; plan", text)
        self.assertIn("15/02/2026", text)
        self.assertIn("14:30", text)
        self.assertEqual(_tokens((text, keyboard)), ["event_confirm", "event_edit", "event_cancel"])

    def test_closed_card_reflects_outcome(self) -> None:
        saved, _ = cards.event_closed_card(_event(title="Sync", event_date=date(2026, 2, 15), status="confirmed"))
        discarded, _ = cards.event_closed_card(_event(status="cancelled"))

        self.assertIn("EVENT SAVED", saved)
        self.assertIn("EVENT DISCARDED", discarded)
