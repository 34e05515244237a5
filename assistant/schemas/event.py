from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ..models.event import EventStatus


class EventDraftCreate(BaseModel):
    user_id: UUID


class EventDraftUpdate(BaseModel):
    """Partial update; only fields explicitly sent are applied."""

    title: Optional[str] = None
    event_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None
    all_day: Optional[bool] = None


class EventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: Optional[str] = None
    event_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None
    all_day: Optional[bool] = None
    status: EventStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
