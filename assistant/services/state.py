"""Per-user conversation row: wizard tag, its data bag and the tracked card message."""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.bot_state import BotState


async def _get_or_create_state(session: AsyncSession, user_id: UUID) -> BotState:
    result = await session.execute(select(BotState).where(BotState.user_id == user_id))
    state = result.scalars().first()
    if state is None:
        state = BotState(user_id=user_id, current_state=None, state_data={})
        session.add(state)
    return state


async def get_state(session: AsyncSession, user_id: UUID) -> Optional[BotState]:
    result = await session.execute(select(BotState).where(BotState.user_id == user_id))
    return result.scalars().first()


async def set_state(
    session: AsyncSession,
    user_id: UUID,
    current_state: Optional[str],
    state_data: Optional[dict[str, Any]] = None,
) -> BotState:
    state = await _get_or_create_state(session, user_id)
    state.current_state = current_state
    state.state_data = dict(state_data or {})
    await session.commit()
    await session.refresh(state)
    return state


async def update_state_data(
    session: AsyncSession, user_id: UUID, updates: dict[str, Any]
) -> BotState:
    state = await _get_or_create_state(session, user_id)
    # JSONB columns only notice reassignment, not in-place mutation.
    state.state_data = {**(state.state_data or {}), **updates}
    await session.commit()
    await session.refresh(state)
    return state


async def clear_state(session: AsyncSession, user_id: UUID) -> BotState:
    return await set_state(session, user_id, None, {})


async def set_last_message_id(
    session: AsyncSession, user_id: UUID, message_id: Optional[int]
) -> BotState:
    state = await _get_or_create_state(session, user_id)
    state.last_message_id = message_id
    await session.commit()
    await session.refresh(state)
    return state
