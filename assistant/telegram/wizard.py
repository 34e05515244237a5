"""Event creation wizard.

The stored state row holds a tag plus a small data bag (the draft id, the
card message being edited and the outstanding force-reply prompt). On every
input the row and the active draft are combined into one of the typed state
variants below. Each variant requires exactly the draft fields that must
already be captured in that state, so a row that points at a missing draft or
at a draft lacking one of those fields does not validate and is treated as
stale.

Capture order is title, date, all-day choice, start, end, location. After
each capture the wizard moves to the first field still missing, or to review
when none is, which also brings an edited field straight back to review.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, time
from enum import Enum
from html import escape
from typing import Annotated, Any, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, model_validator

from ..schemas.event import EventRead
from . import cards
from .cards import Card
from .helpers import format_clock, format_date, parse_date, parse_time
from .screens import ScreenContext

logger = logging.getLogger(__name__)


class EventStep(str, Enum):
    TITLE = "awaiting_title"
    DATE = "awaiting_date"
    ALL_DAY = "awaiting_allday_choice"
    START = "awaiting_start"
    END = "awaiting_end"
    LOCATION = "awaiting_location"
    REVIEW = "review"


TEXT_STEPS = frozenset({EventStep.TITLE, EventStep.DATE, EventStep.START, EventStep.END, EventStep.LOCATION})


class _StateBase(BaseModel):
    draft_id: UUID
    message_id: Optional[int] = None
    prompt_message_id: Optional[int] = None


class AwaitingTitle(_StateBase):
    state: Literal["awaiting_title"] = "awaiting_title"


class AwaitingDate(_StateBase):
    state: Literal["awaiting_date"] = "awaiting_date"
    title: str


class AwaitingAllDayChoice(_StateBase):
    state: Literal["awaiting_allday_choice"] = "awaiting_allday_choice"
    title: str
    event_date: date


class AwaitingStart(_StateBase):
    state: Literal["awaiting_start"] = "awaiting_start"
    title: str
    event_date: date


class AwaitingEnd(_StateBase):
    state: Literal["awaiting_end"] = "awaiting_end"
    title: str
    event_date: date
    start_time: time


class AwaitingLocation(_StateBase):
    state: Literal["awaiting_location"] = "awaiting_location"
    title: str
    event_date: date
    all_day: bool = False
    start_time: Optional[time] = None
    end_time: Optional[time] = None

    @model_validator(mode="after")
    def _timed_needs_both_times(self) -> "AwaitingLocation":
        if not self.all_day and (self.start_time is None or self.end_time is None):
            raise ValueError("a timed event needs start and end before its location")
        return self


class Review(_StateBase):
    state: Literal["review"] = "review"
    title: str
    event_date: date


WizardState = Annotated[
    Union[
        AwaitingTitle,
        AwaitingDate,
        AwaitingAllDayChoice,
        AwaitingStart,
        AwaitingEnd,
        AwaitingLocation,
        Review,
    ],
    Field(discriminator="state"),
]

_STATE_ADAPTER: TypeAdapter[WizardState] = TypeAdapter(WizardState)

_DRAFT_FIELDS = {"title", "event_date", "start_time", "end_time", "location", "all_day"}


def first_missing(draft: EventRead) -> EventStep:
    if not draft.title:
        return EventStep.TITLE
    if draft.event_date is None:
        return EventStep.DATE
    if draft.all_day is None:
        return EventStep.ALL_DAY
    if not draft.all_day:
        if draft.start_time is None:
            return EventStep.START
        if draft.end_time is None:
            return EventStep.END
        if draft.location is None:
            return EventStep.LOCATION
    return EventStep.REVIEW


def build_state(
    step: EventStep, draft: Optional[EventRead], state_data: Optional[dict[str, Any]] = None
) -> Optional[WizardState]:
    """Combine a stored tag, its data bag and the draft; ``None`` means stale."""
    if draft is None:
        return None
    data = dict(state_data or {})
    if data.get("draft_id") is not None and str(data["draft_id"]) != str(draft.id):
        return None
    payload = draft.model_dump(include=_DRAFT_FIELDS, exclude_none=True)
    payload.update(data)
    payload["draft_id"] = draft.id
    payload["state"] = step.value
    try:
        return _STATE_ADAPTER.validate_python(payload)
    except ValidationError:
        return None


@dataclass(frozen=True)
class Prompt:
    field: str
    text: str
    placeholder: str
    error: str


PROMPTS: dict[EventStep, Prompt] = {
    EventStep.TITLE: Prompt(
        "title", "📝 What is the event title?", "E.g. Team meeting", "❌ The title cannot be empty."
    ),
    EventStep.DATE: Prompt(
        "event_date", "📅 What is the date? (dd/mm/yyyy)", "E.g. 15/02/2026", "❌ Invalid date. Use the format dd/mm/yyyy"
    ),
    EventStep.START: Prompt(
        "start_time", "🟢 Start time? (HH:MM)", "E.g. 14:30", "❌ Invalid time. Use the format HH:MM"
    ),
    EventStep.END: Prompt(
        "end_time", "🔴 End time? (HH:MM)", "E.g. 16:00", "❌ Invalid time. Use the format HH:MM"
    ),
    EventStep.LOCATION: Prompt(
        "location", "📍 Where is it?", "E.g. Office, Room 302", "❌ The location cannot be empty."
    ),
}


def capture(step: EventStep, text: str) -> Optional[dict[str, Any]]:
    """Validate one answer; ``None`` means the same prompt must be asked again."""
    if step in (EventStep.TITLE, EventStep.LOCATION):
        if not text.strip():
            return None
        return {PROMPTS[step].field: text}
    if step is EventStep.DATE:
        parsed_date = parse_date(text)
        return {"event_date": parsed_date} if parsed_date else None
    if step in (EventStep.START, EventStep.END):
        parsed_time = parse_time(text)
        return {PROMPTS[step].field: parsed_time} if parsed_time else None
    return None


def _current_value(step: EventStep, draft: EventRead) -> Optional[str]:
    value = getattr(draft, PROMPTS[step].field)
    if value is None:
        return None
    if isinstance(value, date):
        return format_date(value)
    if isinstance(value, time):
        return format_clock(value)
    return str(value)


class EventWizard:
    """Drives one user's event draft through the capture steps."""

    def __init__(self, ctx: ScreenContext) -> None:
        self.ctx = ctx
        self.api = ctx.api

    async def _active_draft(self) -> Optional[EventRead]:
        payload = await self.api.get_active_draft(self.ctx.user_id)
        return EventRead.model_validate(payload) if payload else None

    async def _update(self, draft: EventRead, **fields: Any) -> EventRead:
        return EventRead.model_validate(await self.api.update_draft(str(draft.id), **fields))

    async def reset(self) -> None:
        await self.api.clear_state(self.ctx.user_id)

    async def _render(self, message_id: Optional[int], card: Card) -> int:
        if message_id is not None:
            await self.ctx.show(message_id, card)
            return message_id
        text, keyboard = card
        message = await self.ctx.transport.send_message(self.ctx.chat_id, text, reply_markup=keyboard)
        await self.api.set_last_message_id(self.ctx.user_id, message.message_id)
        return message.message_id

    async def _prompt(self, step: EventStep, *, error: bool = False, current: Optional[str] = None) -> None:
        prompt = PROMPTS[step]
        text = prompt.error if error else prompt.text
        if current:
            text += f"\n<i>Current: {escape(current)}</i>"
        message = await self.ctx.transport.send_force_reply(self.ctx.chat_id, text, prompt.placeholder)
        if message is not None:
            await self.api.update_state_data(self.ctx.user_id, {"prompt_message_id": message.message_id})

    async def _drop_open_prompt(self) -> None:
        row = await self.api.get_state(self.ctx.user_id)
        prompt_message_id = (row.get("state_data") or {}).get("prompt_message_id")
        if prompt_message_id:
            await self.ctx.transport.delete_message(self.ctx.chat_id, prompt_message_id)

    async def _advance(
        self,
        draft: EventRead,
        step: EventStep,
        message_id: Optional[int],
        *,
        show_current: bool = False,
        prompt_open: bool = True,
    ) -> None:
        if prompt_open:
            await self._drop_open_prompt()
        theme = self.ctx.theme
        if step is EventStep.REVIEW:
            card = cards.event_review_card(draft, theme)
        elif step is EventStep.ALL_DAY:
            card = cards.all_day_question_card(draft, theme)
        else:
            card = cards.event_progress_card(draft, theme)
        message_id = await self._render(message_id, card)
        await self.api.set_state(
            self.ctx.user_id, step.value, {"draft_id": str(draft.id), "message_id": message_id}
        )
        if step in TEXT_STEPS:
            current = _current_value(step, draft) if show_current else None
            await self._prompt(step, current=current)

    async def start(self, message_id: int) -> None:
        """Open a draft, or resume the one already in progress."""
        draft = EventRead.model_validate(await self.api.start_draft(self.ctx.user_id))
        step = first_missing(draft)
        logger.info("Event wizard for user %s at %s", self.ctx.user_id, step.value)
        await self._advance(draft, step, message_id)

    async def handle_text(self, text: str, row: dict[str, Any]) -> bool:
        """Feed free text to the wizard.

        Returns ``False`` when the text is not wizard input and should go to
        the classifier instead.
        """
        tag = row.get("current_state")
        try:
            step = EventStep(tag)
        except ValueError:
            logger.info("Unknown wizard state %r for user %s; clearing", tag, self.ctx.user_id)
            await self.reset()
            return False
        if step not in TEXT_STEPS:
            await self.reset()
            return False

        state_data = row.get("state_data") or {}
        prompt_message_id = state_data.get("prompt_message_id")
        if prompt_message_id:
            await self.ctx.transport.delete_message(self.ctx.chat_id, prompt_message_id)

        draft = await self._active_draft()
        state = build_state(step, draft, state_data)
        if state is None:
            logger.info("Stale wizard state %s for user %s; resetting", step.value, self.ctx.user_id)
            await self.reset()
            return True

        fields = capture(step, text)
        if fields is None:
            await self._prompt(step, error=True)
            return True

        updated = await self._update(draft, **fields)
        message_id = state.message_id or row.get("last_message_id")
        await self._advance(updated, first_missing(updated), message_id, prompt_open=False)
        return True

    async def choose_all_day(self, all_day: bool, message_id: int) -> None:
        draft = await self._active_draft()
        if draft is None:
            await self.reset()
            return
        if all_day:
            draft = await self._update(draft, all_day=True, start_time=None, end_time=None)
        else:
            draft = await self._update(draft, all_day=False)
        await self._advance(draft, first_missing(draft), message_id)

    async def edit_field(self, step: EventStep, message_id: int) -> None:
        """Ask for one field again, keeping everything already captured."""
        draft = await self._active_draft()
        if draft is None:
            await self.reset()
            return
        if step in (EventStep.START, EventStep.END) and draft.all_day:
            draft = await self._update(draft, all_day=False)
        if build_state(step, draft) is None:
            step = first_missing(draft)
        await self._advance(draft, step, message_id, show_current=True)

    async def toggle_all_day(self, message_id: int) -> None:
        draft = await self._active_draft()
        if draft is None:
            await self.reset()
            return
        if draft.all_day:
            draft = await self._update(draft, all_day=False)
        else:
            draft = await self._update(draft, all_day=True, start_time=None, end_time=None)
        await self._advance(draft, first_missing(draft), message_id)

    async def show_edit_menu(self, message_id: int) -> None:
        draft = await self._active_draft()
        if draft is None:
            await self.reset()
            return
        await self.ctx.show(message_id, cards.event_edit_menu_card(draft, self.ctx.theme))

    async def exit_edit(self, message_id: int) -> None:
        draft = await self._active_draft()
        if draft is None:
            await self.reset()
            return
        await self._advance(draft, first_missing(draft), message_id)

    async def confirm(self, message_id: int) -> None:
        draft = await self._active_draft()
        if draft is None:
            await self.reset()
            return
        step = first_missing(draft)
        if step is not EventStep.REVIEW:
            await self._advance(draft, step, message_id)
            return
        confirmed = EventRead.model_validate(await self.api.confirm_draft(str(draft.id)))
        await self.reset()
        await self.ctx.show(message_id, cards.event_closed_card(confirmed, self.ctx.theme))
        logger.info("Event %s confirmed for user %s", confirmed.id, self.ctx.user_id)

    async def cancel(self, message_id: int) -> None:
        await self._drop_open_prompt()
        draft = await self._active_draft()
        if draft is None:
            await self.reset()
            return
        cancelled = EventRead.model_validate(await self.api.cancel_draft(str(draft.id)))
        await self.reset()
        await self.ctx.show(message_id, cards.event_closed_card(cancelled, self.ctx.theme))
        logger.info("Event draft %s cancelled for user %s", cancelled.id, self.ctx.user_id)
