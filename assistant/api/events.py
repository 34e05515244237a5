from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..schemas.event import EventDraftCreate, EventDraftUpdate, EventRead
from ..services import cancel_draft, confirm_draft, get_active_draft, start_draft, update_draft
from ..services.events import EventNotFoundError, EventStateError

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]


@router.get("/draft", response_model=EventRead)
async def get_active_draft_endpoint(
    session: SessionDep, user_id: UUID = Query(...)
) -> EventRead:
    draft = await get_active_draft(session, user_id)
    if not draft:
        raise HTTPException(status_code=404, detail="No active draft")
    return EventRead.model_validate(draft)


@router.post("/draft", response_model=EventRead)
async def start_draft_endpoint(
    payload: EventDraftCreate, session: SessionDep, response: Response
) -> EventRead:
    draft, created = await start_draft(session, payload.user_id)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return EventRead.model_validate(draft)


@router.patch("/{event_id}", response_model=EventRead)
async def update_draft_endpoint(
    event_id: UUID, payload: EventDraftUpdate, session: SessionDep
) -> EventRead:
    try:
        event = await update_draft(session, event_id, payload)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")
    except EventStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return EventRead.model_validate(event)


@router.post("/{event_id}/confirm", response_model=EventRead)
async def confirm_draft_endpoint(event_id: UUID, session: SessionDep) -> EventRead:
    try:
        event = await confirm_draft(session, event_id)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")
    except EventStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return EventRead.model_validate(event)


@router.post("/{event_id}/cancel", response_model=EventRead)
async def cancel_draft_endpoint(event_id: UUID, session: SessionDep) -> EventRead:
    try:
        event = await cancel_draft(session, event_id)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")
    except EventStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return EventRead.model_validate(event)
