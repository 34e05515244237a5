from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..db import get_db
from ..schemas.health import (
    SleepDay,
    SleepLogCreate,
    SleepLogRead,
    SleepStats,
    WaterDay,
    WaterLogCreate,
    WaterLogRead,
    WaterStats,
)
from ..services import get_sleep_overview, get_water_overview, log_sleep, log_water
from ..utils.timezone import user_timezone

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]
UserQuery = Annotated[UUID, Query()]


@router.post("/sleep", response_model=SleepLogRead, status_code=status.HTTP_201_CREATED)
async def log_sleep_endpoint(payload: SleepLogCreate, session: SessionDep) -> SleepLogRead:
    log = await log_sleep(session, payload)
    return SleepLogRead.model_validate(log)


@router.get("/sleep/stats", response_model=SleepStats)
async def sleep_stats_endpoint(session: SessionDep, user_id: UserQuery) -> SleepStats:
    stats, _days = await get_sleep_overview(session, user_id, user_timezone())
    return stats


@router.get("/sleep/weekly", response_model=list[SleepDay])
async def sleep_weekly_endpoint(session: SessionDep, user_id: UserQuery) -> list[SleepDay]:
    _stats, days = await get_sleep_overview(session, user_id, user_timezone())
    return days


@router.post("/water", response_model=WaterLogRead, status_code=status.HTTP_201_CREATED)
async def log_water_endpoint(payload: WaterLogCreate, session: SessionDep) -> WaterLogRead:
    log = await log_water(session, payload)
    return WaterLogRead.model_validate(log)


@router.get("/water/stats", response_model=WaterStats)
async def water_stats_endpoint(session: SessionDep, user_id: UserQuery) -> WaterStats:
    stats, _days = await get_water_overview(
        session, user_id, user_timezone(), get_settings().water_goal_ml
    )
    return stats


@router.get("/water/weekly", response_model=list[WaterDay])
async def water_weekly_endpoint(session: SessionDep, user_id: UserQuery) -> list[WaterDay]:
    _stats, days = await get_water_overview(
        session, user_id, user_timezone(), get_settings().water_goal_ml
    )
    return days
