from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from functools import partial
from html import escape
from typing import Any, Optional

import httpx
from pydantic import ValidationError
from telegram import BotCommand, Update
from telegram.ext import (
    AIORateLimiter,
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from ..config import get_settings
from ..schemas.intent import ClassifiedIntent, FinanceIntentData, IntentType, WaterIntentData
from . import screens
from .api_client import AssistantApiClient
from .cards import FINANCES_BUTTON, STATEMENT_PREFIX
from .helpers import ensure_user_state
from .screens import ScreenContext
from .session import cancel_rerender, user_lock
from .transport import TelegramTransport
from .wizard import EventStep, EventWizard

logger = logging.getLogger(__name__)

ALLOWED_UPDATES = ["message", "callback_query"]
HEALTH_BUTTON = ("↩️ Back to Health", "health")

Handler = Callable[..., Awaitable[None]]


async def start_event(ctx: ScreenContext, message_id: int) -> None:
    await EventWizard(ctx).start(message_id)


async def edit_event_field(ctx: ScreenContext, message_id: int, *, step: EventStep) -> None:
    await EventWizard(ctx).edit_field(step, message_id)


async def choose_all_day(ctx: ScreenContext, message_id: int, *, all_day: bool) -> None:
    await EventWizard(ctx).choose_all_day(all_day, message_id)


async def toggle_all_day(ctx: ScreenContext, message_id: int) -> None:
    await EventWizard(ctx).toggle_all_day(message_id)


async def show_event_edit_menu(ctx: ScreenContext, message_id: int) -> None:
    await EventWizard(ctx).show_edit_menu(message_id)


async def exit_event_edit(ctx: ScreenContext, message_id: int) -> None:
    await EventWizard(ctx).exit_edit(message_id)


async def confirm_event(ctx: ScreenContext, message_id: int) -> None:
    await EventWizard(ctx).confirm(message_id)


async def cancel_event(ctx: ScreenContext, message_id: int) -> None:
    await EventWizard(ctx).cancel(message_id)


_coming_soon = partial(
    screens.show_placeholder,
    title="🔧 In development",
    message="This feature will be available soon!",
    back=FINANCES_BUTTON,
)

CALLBACK_ROUTES: dict[str, Handler] = {
    # Hub
    "hub": screens.show_hub,
    "back_hub": screens.show_hub,
    "show_modules": screens.show_modules,
    "good_morning": screens.good_morning,
    "good_night": screens.good_night,
    "noop": screens.noop,
    # Health
    "health": screens.show_health,
    "health_sleep": screens.show_sleep,
    "health_sleep_details": screens.show_sleep,
    "health_water": screens.show_water,
    "health_activity": partial(
        screens.show_placeholder,
        title="🏃 Activity",
        message="Activity tracking is coming soon!",
        back=HEALTH_BUTTON,
    ),
    "health_stats": screens.show_health_stats,
    "sleep": screens.show_sleep,
    "water": screens.show_water,
    "water_quick": screens.show_water_quick,
    "water_insert": screens.show_water_quick,
    "water_250": partial(screens.log_water_amount, amount_ml=250),
    "water_500": partial(screens.log_water_amount, amount_ml=500),
    "water_1000": partial(screens.log_water_amount, amount_ml=1000),
    # Events
    "create_event": start_event,
    "event_title": partial(edit_event_field, step=EventStep.TITLE),
    "event_date": partial(edit_event_field, step=EventStep.DATE),
    "event_start": partial(edit_event_field, step=EventStep.START),
    "event_end": partial(edit_event_field, step=EventStep.END),
    "event_location": partial(edit_event_field, step=EventStep.LOCATION),
    "event_all_day": toggle_all_day,
    "event_allday_yes": partial(choose_all_day, all_day=True),
    "event_allday_no": partial(choose_all_day, all_day=False),
    "event_confirm": confirm_event,
    "event_cancel": cancel_event,
    "event_edit": show_event_edit_menu,
    "event_exit": exit_event_edit,
    "edit_title": partial(edit_event_field, step=EventStep.TITLE),
    "edit_date": partial(edit_event_field, step=EventStep.DATE),
    "edit_start": partial(edit_event_field, step=EventStep.START),
    "edit_end": partial(edit_event_field, step=EventStep.END),
    "edit_location": partial(edit_event_field, step=EventStep.LOCATION),
    # Finances
    "finances": screens.show_finances,
    "fin_entrada": partial(
        screens.show_placeholder,
        title="📥 New income",
        message="Send a message like <code>received 500 salary</code> to record income.",
        back=FINANCES_BUTTON,
    ),
    "fin_saida": partial(
        screens.show_placeholder,
        title="📤 New expense",
        message="Send a message like <code>spent 42 on lunch</code> to record an expense.",
        back=FINANCES_BUTTON,
    ),
    "fin_bills": screens.show_bills,
    "fin_categories": screens.show_categories,
    "fin_extrato": screens.show_statement,
    "fin_goals": screens.show_goals,
    "fin_reports": screens.show_reports,
    "bill_add": _coming_soon,
    "bill_edit": _coming_soon,
    "cat_add": _coming_soon,
    "cat_edit": _coming_soon,
    "goal_add": _coming_soon,
    # Other modules
    "studies": partial(
        screens.show_placeholder, title="📚 Studies", message="Study tracking is coming soon!"
    ),
    "reminders": partial(
        screens.show_placeholder, title="⏰ Reminders", message="Custom reminders are coming soon!"
    ),
}

PREFIX_ROUTES: dict[str, Handler] = {
    STATEMENT_PREFIX: screens.show_statement_page,
}


def resolve_callback(data: str) -> Optional[Handler]:
    handler = CALLBACK_ROUTES.get(data)
    if handler is not None:
        return handler
    for prefix, prefixed in PREFIX_ROUTES.items():
        if data.startswith(prefix):
            return partial(prefixed, suffix=data[len(prefix):])
    return None


_application: Application | None = None
_api_client: AssistantApiClient | None = None
_lock = asyncio.Lock()


async def _screen_context(update: Update, context: ContextTypes.DEFAULT_TYPE) -> ScreenContext:
    bot_data = context.application.bot_data
    api_client: AssistantApiClient = bot_data["api_client"]
    tg_user = update.effective_user
    user = await api_client.ensure_user(tg_user.id, tg_user.full_name, tg_user.first_name)
    return ScreenContext(
        api=api_client,
        transport=bot_data["transport"],
        settings=get_settings(),
        user=user,
        chat_id=update.effective_chat.id,
        user_data=ensure_user_state(context),
    )


async def _abandon(ctx: Optional[ScreenContext]) -> None:
    if ctx is None:
        return
    try:
        await ctx.api.clear_state(ctx.user_id)
    except httpx.HTTPError:
        logger.warning("Could not clear wizard state for user %s", ctx.user_id)


async def _run_for_user(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    label: str,
    action: Callable[[ScreenContext], Awaitable[None]],
) -> None:
    """Run ``action`` with this user's updates serialised."""
    user_data = ensure_user_state(context)
    cancel_rerender(user_data)
    async with user_lock(user_data):
        ctx: Optional[ScreenContext] = None
        try:
            ctx = await _screen_context(update, context)
            await action(ctx)
        except Exception:
            logger.exception("%s failed", label)
            await _abandon(ctx)


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if update.effective_user is None or update.effective_chat is None:
        return

    async def _action(ctx: ScreenContext) -> None:
        row = await ctx.api.get_state(ctx.user_id)
        if row.get("last_message_id"):
            await ctx.transport.delete_message(ctx.chat_id, row["last_message_id"])
        message = await screens.send_hub(ctx)
        if message is not None:
            await ctx.api.set_last_message_id(ctx.user_id, message.message_id)

    await _run_for_user(update, context, "/start", _action)


async def callback_router(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    if query is None or query.message is None or update.effective_user is None:
        return
    await query.answer()
    data = query.data or ""
    message_id = query.message.message_id

    async def _action(ctx: ScreenContext) -> None:
        logger.info("Callback %s from user %s", data, ctx.user_id)
        await ctx.api.set_last_message_id(ctx.user_id, message_id)
        handler = resolve_callback(data)
        if handler is None:
            logger.info("Unknown callback: %s", data)
            return
        await handler(ctx, message_id)

    await _run_for_user(update, context, f"Callback {data}", _action)


async def text_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    message = update.message
    if message is None or update.effective_user is None:
        return
    text = (message.text or "").strip()
    if not text:
        return

    async def _action(ctx: ScreenContext) -> None:
        await ctx.transport.delete_message(ctx.chat_id, message.message_id)
        row = await ctx.api.get_state(ctx.user_id)
        if row.get("current_state") and await EventWizard(ctx).handle_text(text, row):
            return
        await respond_with_classifier(ctx, text)

    await _run_for_user(update, context, "Text message", _action)


async def _record_transaction(ctx: ScreenContext, data: FinanceIntentData) -> None:
    categories = await ctx.api.list_categories(ctx.user_id, data.type.value)
    wanted = data.category_name.casefold()
    category = next((item for item in categories if item["name"].casefold() == wanted), None)
    if category is None:
        category = await ctx.api.create_category(
            {
                "user_id": ctx.user_id,
                "name": data.category_name,
                "emoji": data.category_emoji,
                "category_type": data.type.value,
            }
        )
    await ctx.api.create_transaction(
        {
            "user_id": ctx.user_id,
            "transaction_type": data.type.value,
            "amount": str(data.amount),
            "category_id": str(category["id"]),
            "description": data.description,
        }
    )


async def respond_with_classifier(ctx: ScreenContext, text: str) -> None:
    intent = ClassifiedIntent.model_validate(await ctx.api.classify(text))
    reply = escape(intent.response)

    if intent.type is IntentType.FINANCE_TRANSACTION:
        try:
            await _record_transaction(ctx, FinanceIntentData.model_validate(intent.data))
        except (httpx.HTTPError, ValidationError):
            logger.exception("Could not record transaction for user %s", ctx.user_id)
            await ctx.transport.send_message(ctx.chat_id, "❌ Something went wrong while recording your transaction.")
            return
        await ctx.transport.send_message(ctx.chat_id, f"✅ {reply}")
        return

    if intent.type is IntentType.HEALTH_WATER:
        try:
            water = WaterIntentData.model_validate(intent.data)
            await ctx.api.log_water(ctx.user_id, water.amount_ml)
        except (httpx.HTTPError, ValidationError):
            logger.exception("Could not log water for user %s", ctx.user_id)
            await ctx.transport.send_message(ctx.chat_id, "❌ Could not log your water.")
            return
        await ctx.transport.send_message(ctx.chat_id, f"💧 {reply}")
        return

    await ctx.transport.send_message(ctx.chat_id, reply or "🤔 I am not sure how to help with that.")


def _create_application(token: str, api_client: AssistantApiClient) -> Application:
    application = (
        Application.builder()
        .token(token)
        .rate_limiter(AIORateLimiter())
        .build()
    )
    application.bot_data["api_client"] = api_client
    application.bot_data["transport"] = TelegramTransport(application.bot)
    application.add_handler(CommandHandler("start", start))
    application.add_handler(CallbackQueryHandler(callback_router))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, text_message))
    return application


async def init_bot() -> None:
    """Initialise the Telegram bot and register the webhook."""
    settings = get_settings()
    if not settings.telegram_bot_token or not settings.telegram_webhook_secret:
        logger.info("Telegram bot or webhook secret not configured; skipping bot initialisation.")
        return
    if not settings.backend_base_url:
        logger.warning("BACKEND_BASE_URL is missing; skipping Telegram webhook setup.")
        return

    base_url = str(settings.backend_base_url)
    webhook_url = base_url.rstrip("/") + f"/api/telegram/webhook/{settings.telegram_webhook_secret}"

    api_base_url = str(settings.internal_backend_base_url or settings.backend_base_url)

    async with _lock:
        global _application, _api_client
        if _application is not None:
            return

        api_client = AssistantApiClient(api_base_url)
        application = _create_application(settings.telegram_bot_token, api_client)

        try:
            await application.initialize()
            await application.start()
            try:
                await application.bot.set_my_commands([BotCommand("start", "Open the hub")])
            except Exception:
                logger.exception("Failed to set Telegram command list.")
            if settings.telegram_register_webhook_on_start:
                await application.bot.set_webhook(
                    url=webhook_url, drop_pending_updates=False, allowed_updates=ALLOWED_UPDATES
                )
        except Exception:
            logger.exception("Failed to initialise Telegram webhook; bot disabled for this run.")
            with contextlib.suppress(Exception):
                await application.stop()
            with contextlib.suppress(Exception):
                await application.shutdown()
            await api_client.aclose()
            return

        _application = application
        _api_client = api_client
        logger.info("Telegram webhook configured at %s", webhook_url)


async def handle_update(payload: dict[str, Any]) -> None:
    """Process a Telegram update forwarded by FastAPI."""
    async with _lock:
        if _application is None:
            raise RuntimeError("Telegram bot is not initialised.")
        application = _application
    update = Update.de_json(payload, application.bot)
    await application.process_update(update)


async def shutdown_bot() -> None:
    """Tear down the Telegram bot."""
    async with _lock:
        global _application, _api_client
        if _application is None:
            return
        await _application.stop()
        await _application.shutdown()
        if _api_client:
            await _api_client.aclose()
        _application = None
        _api_client = None
