from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.event import Event, EventStatus
from ..schemas.event import EventDraftUpdate


class EventNotFoundError(Exception):
    """Raised when an event cannot be found."""


class EventStateError(Exception):
    """Raised when an event is no longer a draft."""


async def get_active_draft(session: AsyncSession, user_id: UUID) -> Optional[Event]:
    result = await session.execute(
        select(Event)
        .where(Event.user_id == user_id, Event.status == EventStatus.DRAFT)
        .order_by(Event.created_at.desc())
    )
    return result.scalars().first()


async def start_draft(session: AsyncSession, user_id: UUID) -> tuple[Event, bool]:
    """Return the user's draft, creating one only when none is active.

    The second element tells whether the draft was created by this call.
    """
    existing = await get_active_draft(session, user_id)
    if existing:
        return existing, False

    draft = Event(user_id=user_id, status=EventStatus.DRAFT)
    session.add(draft)
    try:
        await session.commit()
    except IntegrityError:
        # Lost a race against another start for the same user.
        await session.rollback()
        existing = await get_active_draft(session, user_id)
        if existing is None:
            raise
        return existing, False
    await session.refresh(draft)
    return draft, True


async def _get_draft(session: AsyncSession, event_id: UUID) -> Event:
    event = await session.get(Event, event_id)
    if not event:
        raise EventNotFoundError("Event not found")
    if event.status != EventStatus.DRAFT:
        raise EventStateError(f"Event is already {event.status.value}")
    return event


async def update_draft(session: AsyncSession, event_id: UUID, payload: EventDraftUpdate) -> Event:
    event = await _get_draft(session, event_id)
    for field in payload.model_fields_set:
        setattr(event, field, getattr(payload, field))
    await session.commit()
    await session.refresh(event)
    return event


async def confirm_draft(session: AsyncSession, event_id: UUID) -> Event:
    event = await _get_draft(session, event_id)
    if not event.title or not event.event_date:
        raise EventStateError("Event needs a title and a date before it can be confirmed")
    event.status = EventStatus.CONFIRMED
    await session.commit()
    await session.refresh(event)
    return event


async def cancel_draft(session: AsyncSession, event_id: UUID) -> Event:
    event = await _get_draft(session, event_id)
    event.status = EventStatus.CANCELLED
    await session.commit()
    await session.refresh(event)
    return event
