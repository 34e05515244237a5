from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from functools import partial
from types import SimpleNamespace
from uuid import uuid4
from unittest import IsolatedAsyncioTestCase
from unittest.mock import AsyncMock, patch

from assistant.telegram import bot, screens
from assistant.telegram.screens import ScreenContext
from assistant.telegram.session import RERENDER_KEY, schedule_rerender

USER_ID = "11111111-2222-3333-4444-555555555555"
CHAT_ID = 528101001


def _settings(**overrides) -> SimpleNamespace:
    values = {
        "timezone": "UTC",
        "currency": "BRL",
        "default_display_name": "there",
        "home_rerender_delay_seconds": 0,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def _make_api() -> AsyncMock:
    api_client = AsyncMock()
    api_client.ensure_user.return_value = {"id": USER_ID, "display_name": "Faris"}
    api_client.get_state.return_value = {"current_state": None, "state_data": {}, "last_message_id": None}
    api_client.sleep_stats.return_value = {}
    api_client.water_stats.return_value = {"today_ml": 1000, "goal_ml": 4000, "percent_complete": 25, "remaining": 3000}
    return api_client


def _make_context(api_client: AsyncMock, transport: AsyncMock, user_data: dict | None = None) -> SimpleNamespace:
    return SimpleNamespace(
        application=SimpleNamespace(bot_data={"api_client": api_client, "transport": transport}),
        user_data={} if user_data is None else user_data,
    )


def _tg_user() -> SimpleNamespace:
    return SimpleNamespace(id=CHAT_ID, full_name="Faris Tester", first_name="Faris")


def _callback_update(data: str, message_id: int = 100) -> SimpleNamespace:
    query = SimpleNamespace(data=data, message=SimpleNamespace(message_id=message_id), answer=AsyncMock())
    return SimpleNamespace(
        callback_query=query,
        effective_user=_tg_user(),
        effective_chat=SimpleNamespace(id=CHAT_ID),
    )


def _text_update(text: str, message_id: int = 42) -> SimpleNamespace:
    return SimpleNamespace(
        message=SimpleNamespace(text=text, message_id=message_id),
        effective_user=_tg_user(),
        effective_chat=SimpleNamespace(id=CHAT_ID),
    )


class CallbackRoutingTests(IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.api_client = _make_api()
        self.transport = AsyncMock()
        self.context = _make_context(self.api_client, self.transport)
        settings_patch = patch("assistant.telegram.bot.get_settings", return_value=_settings())
        settings_patch.start()
        self.addCleanup(settings_patch.stop)

    def test_every_event_token_is_routed(self) -> None:
        for token in (
            "create_event",
            "event_title",
            "event_date",
            "event_start",
            "event_end",
            "event_location",
            "event_all_day",
            "event_allday_yes",
            "event_allday_no",
            "event_confirm",
            "event_cancel",
            "event_edit",
            "event_exit",
            "edit_title",
            "edit_date",
            "edit_start",
            "edit_end",
            "edit_location",
        ):
            self.assertIsNotNone(bot.resolve_callback(token), token)

    def test_statement_prefix_resolves_with_suffix(self) -> None:
        handler = bot.resolve_callback("fin_extrato:3:2026")

        self.assertIsInstance(handler, partial)
        self.assertIs(handler.func, screens.show_statement_page)
        self.assertEqual(handler.keywords, {"suffix": "3:2026"})
        self.assertIs(bot.resolve_callback("fin_extrato"), screens.show_statement)
        self.assertIsNone(bot.resolve_callback("does_not_exist"))

    async def test_unknown_callback_is_acknowledged_and_ignored(self) -> None:
        update = _callback_update("does_not_exist")

        await bot.callback_router(update, self.context)

        update.callback_query.answer.assert_awaited_once()
        self.api_client.set_last_message_id.assert_awaited_once_with(USER_ID, 100)
        self.transport.edit_message.assert_not_awaited()
        self.transport.send_message.assert_not_awaited()
        self.api_client.clear_state.assert_not_awaited()

    async def test_statement_page_callback_renders_requested_month(self) -> None:
        self.api_client.month_summary.return_value = {"month": 3, "year": 2026, "total_income": "100.00"}
        self.api_client.list_transactions.return_value = []

        await bot.callback_router(_callback_update("fin_extrato:3:2026"), self.context)

        self.api_client.month_summary.assert_awaited_once_with(USER_ID, month=3, year=2026)
        text = self.transport.edit_message.await_args.args[2]
        self.assertIn("MARCH 2026", text)
        keyboard = self.transport.edit_message.await_args.kwargs["reply_markup"]
        tokens = [button.callback_data for row in keyboard.inline_keyboard for button in row]
        self.assertIn("fin_extrato:2:2026", tokens)
        self.assertIn("fin_extrato:4:2026", tokens)

    async def test_malformed_statement_suffix_is_ignored(self) -> None:
        await bot.callback_router(_callback_update("fin_extrato:13:2026"), self.context)

        self.api_client.month_summary.assert_not_awaited()
        self.transport.edit_message.assert_not_awaited()

    async def test_water_button_logs_and_shows_water_card(self) -> None:
        self.api_client.water_weekly.return_value = []

        await bot.callback_router(_callback_update("water_500"), self.context)

        self.api_client.log_water.assert_awaited_once_with(USER_ID, 500)
        self.assertIn("HYDRATION", self.transport.edit_message.await_args.args[2])

    async def test_failing_handler_abandons_wizard_state(self) -> None:
        self.api_client.water_stats.side_effect = RuntimeError("backend down")

        await bot.callback_router(_callback_update("health_water"), self.context)

        self.api_client.clear_state.assert_awaited_once_with(USER_ID)

    async def test_start_replaces_previous_hub(self) -> None:
        self.api_client.get_state.return_value = {"current_state": None, "state_data": {}, "last_message_id": 77}
        self.transport.send_message.return_value = SimpleNamespace(message_id=78)
        update = SimpleNamespace(effective_user=_tg_user(), effective_chat=SimpleNamespace(id=CHAT_ID))

        await bot.start(update, self.context)

        self.transport.delete_message.assert_awaited_once_with(CHAT_ID, 77)
        self.assertIn("ELITE ASSISTANT", self.transport.send_message.await_args.args[1])
        self.api_client.set_last_message_id.assert_awaited_once_with(USER_ID, 78)


class TextMessageTests(IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.api_client = _make_api()
        self.transport = AsyncMock()
        self.context = _make_context(self.api_client, self.transport)
        settings_patch = patch("assistant.telegram.bot.get_settings", return_value=_settings())
        settings_patch.start()
        self.addCleanup(settings_patch.stop)

    async def test_text_without_wizard_goes_to_classifier(self) -> None:
        self.api_client.classify.return_value = {"type": "chat", "data": {}, "response": "Hello!"}

        await bot.text_message(_text_update("hi there"), self.context)

        self.transport.delete_message.assert_awaited_once_with(CHAT_ID, 42)
        self.api_client.classify.assert_awaited_once_with("hi there")
        self.transport.send_message.assert_awaited_once_with(CHAT_ID, "Hello!")

    async def test_text_consumed_by_wizard_skips_classifier(self) -> None:
        self.api_client.get_state.return_value = {
            "current_state": "awaiting_title",
            "state_data": {"draft_id": str(uuid4())},
            "last_message_id": 100,
        }
        with patch("assistant.telegram.bot.EventWizard") as wizard_cls:
            wizard_cls.return_value.handle_text = AsyncMock(return_value=True)
            await bot.text_message(_text_update("Team sync"), self.context)

        wizard_cls.return_value.handle_text.assert_awaited_once()
        self.assertEqual(wizard_cls.return_value.handle_text.await_args.args[0], "Team sync")
        self.api_client.classify.assert_not_awaited()

    async def test_text_rejected_by_wizard_falls_back_to_classifier(self) -> None:
        self.api_client.get_state.return_value = {"current_state": "review", "state_data": {}}
        self.api_client.classify.return_value = {"type": "chat", "data": {}, "response": ""}
        with patch("assistant.telegram.bot.EventWizard") as wizard_cls:
            wizard_cls.return_value.handle_text = AsyncMock(return_value=False)
            await bot.text_message(_text_update("what now"), self.context)

        self.api_client.classify.assert_awaited_once_with("what now")
        self.transport.send_message.assert_awaited_once_with(CHAT_ID, "🤔 I am not sure how to help with that.")

    async def test_blank_text_is_ignored(self) -> None:
        await bot.text_message(_text_update("   "), self.context)

        self.api_client.ensure_user.assert_not_awaited()


class ClassifierResponseTests(IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.api_client = _make_api()
        self.transport = AsyncMock()
        self.ctx = ScreenContext(
            api=self.api_client,
            transport=self.transport,
            settings=_settings(),
            user={"id": USER_ID},
            chat_id=CHAT_ID,
        )

    async def test_expense_uses_existing_category(self) -> None:
        category_id = uuid4()
        self.api_client.classify.return_value = {
            "type": "finance_transaction",
            "data": {
                "type": "expense",
                "amount": 42.5,
                "categoryName": "food",
                "categoryEmoji": "🍔",
                "description": "Lunch",
            },
            "response": "Expense of R$ 42.50 recorded",
        }
        self.api_client.list_categories.return_value = [{"id": str(category_id), "name": "Food"}]

        await bot.respond_with_classifier(self.ctx, "spent 42.50 on lunch")

        self.api_client.list_categories.assert_awaited_once_with(USER_ID, "expense")
        self.api_client.create_category.assert_not_awaited()
        payload = self.api_client.create_transaction.await_args.args[0]
        self.assertEqual(
            payload,
            {
                "user_id": USER_ID,
                "transaction_type": "expense",
                "amount": "42.5",
                "category_id": str(category_id),
                "description": "Lunch",
            },
        )
        self.transport.send_message.assert_awaited_once_with(CHAT_ID, "✅ Expense of R$ 42.50 recorded")

    async def test_income_creates_missing_category(self) -> None:
        self.api_client.classify.return_value = {
            "type": "finance_transaction",
            "data": {"type": "income", "amount": "500", "categoryName": "Salary", "categoryEmoji": "💼"},
            "response": "Income saved",
        }
        self.api_client.list_categories.return_value = []
        self.api_client.create_category.return_value = {"id": "cat-1", "name": "Salary"}

        await bot.respond_with_classifier(self.ctx, "received 500 salary")

        category_payload = self.api_client.create_category.await_args.args[0]
        self.assertEqual(category_payload["name"], "Salary")
        self.assertEqual(category_payload["category_type"], "income")
        self.assertEqual(self.api_client.create_transaction.await_args.args[0]["category_id"], "cat-1")

    async def test_unusable_finance_data_reports_error(self) -> None:
        self.api_client.classify.return_value = {
            "type": "finance_transaction",
            "data": {"type": "expense"},
            "response": "ok",
        }

        await bot.respond_with_classifier(self.ctx, "spent something")

        self.api_client.create_transaction.assert_not_awaited()
        self.assertIn("❌", self.transport.send_message.await_args.args[1])

    async def test_water_intent_logs_water(self) -> None:
        self.api_client.classify.return_value = {
            "type": "health_water",
            "data": {"amountMl": 300},
            "response": "300ml logged",
        }

        await bot.respond_with_classifier(self.ctx, "drank a glass of water")

        self.api_client.log_water.assert_awaited_once_with(USER_ID, 300)
        self.transport.send_message.assert_awaited_once_with(CHAT_ID, "💧 300ml logged")

    async def test_chat_reply_is_escaped(self) -> None:
        self.api_client.classify.return_value = {"type": "chat", "data": {}, "response": "1 < 2"}

        await bot.respond_with_classifier(self.ctx, "is 1 less than 2?")

        self.transport.send_message.assert_awaited_once_with(CHAT_ID, "1 &lt; 2")


class SessionCoordinationTests(IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.api_client = _make_api()
        self.transport = AsyncMock()
        settings_patch = patch("assistant.telegram.bot.get_settings", return_value=_settings())
        settings_patch.start()
        self.addCleanup(settings_patch.stop)

    async def test_updates_for_one_user_run_one_at_a_time(self) -> None:
        context = _make_context(self.api_client, self.transport)
        update = _callback_update("noop")
        order: list[str] = []
        gate = asyncio.Event()

        async def first(ctx) -> None:
            order.append("first-start")
            await gate.wait()
            order.append("first-end")

        async def second(ctx) -> None:
            order.append("second")

        first_task = asyncio.create_task(bot._run_for_user(update, context, "first", first))
        await asyncio.sleep(0.01)
        second_task = asyncio.create_task(bot._run_for_user(update, context, "second", second))
        await asyncio.sleep(0.01)

        self.assertEqual(order, ["first-start"])
        gate.set()
        await asyncio.gather(first_task, second_task)
        self.assertEqual(order, ["first-start", "first-end", "second"])

    async def test_new_update_cancels_pending_hub_redraw(self) -> None:
        user_data: dict = {}
        context = _make_context(self.api_client, self.transport, user_data)
        render = AsyncMock()
        task = schedule_rerender(user_data, 60, render)

        await bot.callback_router(_callback_update("noop"), context)
        await asyncio.sleep(0)

        self.assertTrue(task.cancelled())
        self.assertNotIn(RERENDER_KEY, user_data)
        render.assert_not_awaited()

    async def test_good_morning_redraws_hub_after_delay(self) -> None:
        woke_at = datetime(2026, 2, 15, 7, 0, tzinfo=timezone.utc)
        self.api_client.log_sleep.return_value = {
            "id": str(uuid4()),
            "user_id": USER_ID,
            "kind": "wake",
            "logged_at": woke_at.isoformat(),
        }
        self.api_client.sleep_stats.return_value = {
            "last_sleep": (woke_at - timedelta(hours=8)).isoformat(),
            "last_wake": woke_at.isoformat(),
        }
        user_data: dict = {}
        ctx = ScreenContext(
            api=self.api_client,
            transport=self.transport,
            settings=_settings(home_rerender_delay_seconds=0),
            user={"id": USER_ID, "display_name": "Faris"},
            chat_id=CHAT_ID,
            user_data=user_data,
        )

        await screens.good_morning(ctx, 100)

        first_text = self.transport.edit_message.await_args.args[2]
        self.assertIn("GOOD MORNING, FARIS!", first_text)
        self.assertIn("Slept <b>8h</b>", first_text)
        self.assertIsNone(self.transport.edit_message.await_args.kwargs["reply_markup"])

        await user_data[RERENDER_KEY]

        self.assertEqual(self.transport.edit_message.await_count, 2)
        self.assertIn("ELITE ASSISTANT", self.transport.edit_message.await_args.args[2])
        self.assertNotIn(RERENDER_KEY, user_data)
