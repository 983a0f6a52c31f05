# campus_events/routes/events_fastapi.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.auth import get_admin_caller, get_current_caller, require_roles
from campus_events.database import get_db
from campus_events.models.event import EventStatus
from campus_events.permissions import Caller, Role
from campus_events.schemas.common import ApiResponse
from campus_events.schemas.event import EventDetail, EventRead, EventStats, EventUpdate
from campus_events.services import event_registry

router = APIRouter(
    tags=["Events"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=ApiResponse[List[EventRead]], response_model_exclude_none=True)
async def read_events(
    status: Optional[EventStatus] = None,
    society_id: Optional[int] = Query(None, alias="societyId"),
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    events = await event_registry.list_events(db, status=status, society_id=society_id, search=search)
    return ApiResponse(count=len(events), data=events)


@router.get("/upcoming", response_model=ApiResponse[List[EventRead]], response_model_exclude_none=True)
async def read_upcoming_events(db: AsyncSession = Depends(get_db)):
    events = await event_registry.list_upcoming_events(db)
    return ApiResponse(count=len(events), data=events)


@router.get(
    "/society/{society_id}",
    response_model=ApiResponse[List[EventRead]],
    response_model_exclude_none=True,
)
async def read_society_events(
    society_id: int, caller: Caller = Depends(get_current_caller), db: AsyncSession = Depends(get_db)
):
    events = await event_registry.list_events(db, society_id=society_id)
    return ApiResponse(count=len(events), data=events)


@router.get("/{event_id}", response_model=ApiResponse[EventDetail], response_model_exclude_none=True)
async def read_event(event_id: int, db: AsyncSession = Depends(get_db)):
    return ApiResponse(data=await event_registry.get_event(db, event_id))


@router.get("/{event_id}/stats", response_model=ApiResponse[EventStats], response_model_exclude_none=True)
async def read_event_stats(
    event_id: int,
    caller: Caller = Depends(require_roles(Role.ADMIN, Role.SOCIETY)),
    db: AsyncSession = Depends(get_db),
):
    return ApiResponse(data=await event_registry.get_event_stats(db, event_id, caller))


@router.put("/{event_id}", response_model=ApiResponse[EventRead], response_model_exclude_none=True)
async def update_event(
    event_id: int,
    event: EventUpdate,
    caller: Caller = Depends(require_roles(Role.ADMIN, Role.SOCIETY)),
    db: AsyncSession = Depends(get_db),
):
    db_event = await event_registry.update_event(db, event_id, event, caller)
    return ApiResponse(message="Event updated successfully", data=EventRead.model_validate(db_event))


@router.delete("/{event_id}", response_model=ApiResponse, response_model_exclude_none=True)
async def delete_event(event_id: int, caller: Caller = Depends(get_admin_caller), db: AsyncSession = Depends(get_db)):
    await event_registry.delete_event(db, event_id, caller)
    return ApiResponse(message="Event deleted successfully")
