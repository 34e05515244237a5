from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Optional

from telegram import Bot, ForceReply, InlineKeyboardButton, InlineKeyboardMarkup, Message
from telegram.constants import ParseMode
from telegram.error import BadRequest, TelegramError

logger = logging.getLogger(__name__)

ButtonRow = Sequence[tuple[str, str]]


def build_keyboard(rows: Sequence[ButtonRow]) -> InlineKeyboardMarkup:
    """Build an inline keyboard from rows of ``(label, callback_data)`` pairs."""
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton(label, callback_data=data) for label, data in row] for row in rows]
    )


def _is_message_not_modified_error(error: Exception) -> bool:
    return "message is not modified" in str(error).lower()


class TelegramTransport:
    """Thin wrapper around the bot that always renders HTML."""

    build_keyboard = staticmethod(build_keyboard)

    def __init__(self, bot: Bot) -> None:
        self.bot = bot

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: Optional[InlineKeyboardMarkup] = None,
    ) -> Optional[Message]:
        return await self.bot.send_message(
            chat_id=chat_id,
            text=text,
            parse_mode=ParseMode.HTML,
            reply_markup=reply_markup,
        )

    async def edit_message(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        reply_markup: Optional[InlineKeyboardMarkup] = None,
    ) -> None:
        try:
            await self.bot.edit_message_text(
                text,
                chat_id=chat_id,
                message_id=message_id,
                parse_mode=ParseMode.HTML,
                reply_markup=reply_markup,
            )
        except BadRequest as exc:
            if not _is_message_not_modified_error(exc):
                raise

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        try:
            await self.bot.delete_message(chat_id=chat_id, message_id=message_id)
        except TelegramError as exc:
            logger.debug("Could not delete message %s in chat %s: %s", message_id, chat_id, exc)

    async def send_force_reply(self, chat_id: int, prompt: str, placeholder: str) -> Optional[Message]:
        return await self.bot.send_message(
            chat_id=chat_id,
            text=prompt,
            parse_mode=ParseMode.HTML,
            reply_markup=ForceReply(selective=True, input_field_placeholder=placeholder),
        )
