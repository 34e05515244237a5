from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.health import SleepLogKind


class SleepLogCreate(BaseModel):
    user_id: UUID
    kind: SleepLogKind


class SleepLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    kind: SleepLogKind
    logged_at: datetime


class WaterLogCreate(BaseModel):
    user_id: UUID
    amount_ml: int = Field(gt=0, le=5000)


class WaterLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    amount_ml: int
    logged_at: datetime


class SleepStats(BaseModel):
    last_wake: Optional[datetime] = None
    last_sleep: Optional[datetime] = None
    avg_hours: Optional[float] = None
    today_sleep_hours: Optional[float] = None


class SleepDay(BaseModel):
    date: date
    hours: Optional[float] = None


class WaterStats(BaseModel):
    today_ml: int = 0
    goal_ml: int
    percent_complete: int = 0
    remaining: int = 0


class WaterDay(BaseModel):
    date: date
    total_ml: int = 0
