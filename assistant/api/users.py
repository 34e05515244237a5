from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..schemas.state import BotStateDataUpdate, BotStateRead, BotStateWrite, LastMessageUpdate
from ..schemas.user import UserCreate, UserRead
from ..services import (
    clear_state,
    create_user,
    get_state,
    get_user,
    get_user_by_telegram_id,
    set_last_message_id,
    set_state,
    update_state_data,
)

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]


async def _require_user(session: AsyncSession, user_id: UUID) -> None:
    if not await get_user(session, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@router.post("", response_model=UserRead, status_code=status.HTTP_200_OK)
async def create_user_endpoint(payload: UserCreate, session: SessionDep) -> UserRead:
    user = await create_user(session, payload)
    return UserRead.model_validate(user)


@router.get("/by-telegram/{telegram_id}", response_model=UserRead)
async def get_user_by_telegram_endpoint(telegram_id: int, session: SessionDep) -> UserRead:
    user = await get_user_by_telegram_id(session, telegram_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserRead.model_validate(user)


@router.get("/{user_id}/state", response_model=BotStateRead)
async def get_state_endpoint(user_id: UUID, session: SessionDep) -> BotStateRead:
    state = await get_state(session, user_id)
    if state is None:
        return BotStateRead()
    return BotStateRead.model_validate(state)


@router.put("/{user_id}/state", response_model=BotStateRead)
async def set_state_endpoint(user_id: UUID, payload: BotStateWrite, session: SessionDep) -> BotStateRead:
    await _require_user(session, user_id)
    state = await set_state(session, user_id, payload.current_state, payload.state_data)
    return BotStateRead.model_validate(state)


@router.patch("/{user_id}/state", response_model=BotStateRead)
async def update_state_data_endpoint(
    user_id: UUID, payload: BotStateDataUpdate, session: SessionDep
) -> BotStateRead:
    await _require_user(session, user_id)
    state = await update_state_data(session, user_id, payload.state_data)
    return BotStateRead.model_validate(state)


@router.delete("/{user_id}/state", status_code=status.HTTP_204_NO_CONTENT)
async def clear_state_endpoint(user_id: UUID, session: SessionDep) -> None:
    await _require_user(session, user_id)
    await clear_state(session, user_id)


@router.put("/{user_id}/last-message", response_model=BotStateRead)
async def set_last_message_endpoint(
    user_id: UUID, payload: LastMessageUpdate, session: SessionDep
) -> BotStateRead:
    await _require_user(session, user_id)
    state = await set_last_message_id(session, user_id, payload.message_id)
    return BotStateRead.model_validate(state)
