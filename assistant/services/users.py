from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User
from ..schemas.user import UserCreate


async def create_user(session: AsyncSession, payload: UserCreate) -> User:
    """Return the user for this Telegram account, creating it on first contact."""
    existing = await get_user_by_telegram_id(session, payload.telegram_id)
    if existing:
        changed = False
        if payload.full_name and existing.full_name != payload.full_name:
            existing.full_name = payload.full_name
            changed = True
        if payload.display_name and not existing.display_name:
            existing.display_name = payload.display_name
            changed = True
        if changed:
            await session.commit()
            await session.refresh(existing)
        return existing

    user = User(
        telegram_id=payload.telegram_id,
        full_name=payload.full_name,
        display_name=payload.display_name,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def get_user(session: AsyncSession, user_id: UUID) -> Optional[User]:
    return await session.get(User, user_id)


async def get_user_by_telegram_id(session: AsyncSession, telegram_id: int) -> Optional[User]:
    result = await session.execute(select(User).where(User.telegram_id == telegram_id))
    return result.scalars().first()
