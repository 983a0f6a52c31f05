# campus_events/routes/registrations_fastapi.py
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.auth import get_current_caller, require_roles
from campus_events.database import get_db
from campus_events.permissions import Caller, Role
from campus_events.schemas.common import ApiResponse
from campus_events.schemas.registration import (
    MyRegistrationRead,
    RegistrationCreate,
    RegistrationCreated,
    RegistrationRead,
    RegistrationStatusUpdate,
)
from campus_events.services import registration_engine

router = APIRouter(
    tags=["Registrations"],
)


@router.post(
    "",
    response_model=ApiResponse[RegistrationCreated],
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
)
async def create_registration(
    registration: RegistrationCreate,
    caller: Caller = Depends(require_roles(Role.STUDENT)),
    db: AsyncSession = Depends(get_db),
):
    db_registration = await registration_engine.register(db, caller, registration)
    return ApiResponse(
        message="Registration successful",
        data=RegistrationCreated(registration_id=db_registration.id),
    )


@router.get("/my", response_model=ApiResponse[List[MyRegistrationRead]], response_model_exclude_none=True)
async def read_my_registrations(
    caller: Caller = Depends(require_roles(Role.STUDENT)), db: AsyncSession = Depends(get_db)
):
    registrations = await registration_engine.list_my_registrations(db, caller)
    return ApiResponse(count=len(registrations), data=registrations)


@router.get(
    "/event/{event_id}",
    response_model=ApiResponse[List[RegistrationRead]],
    response_model_exclude_none=True,
)
async def read_event_registrations(
    event_id: int,
    caller: Caller = Depends(require_roles(Role.ADMIN, Role.SOCIETY)),
    db: AsyncSession = Depends(get_db),
):
    registrations = await registration_engine.list_event_registrations(db, event_id, caller)
    return ApiResponse(count=len(registrations), data=[RegistrationRead.model_validate(r) for r in registrations])


@router.put(
    "/{registration_id}/status",
    response_model=ApiResponse[RegistrationRead],
    response_model_exclude_none=True,
)
async def update_registration_status(
    registration_id: int,
    update: RegistrationStatusUpdate,
    caller: Caller = Depends(require_roles(Role.ADMIN, Role.SOCIETY)),
    db: AsyncSession = Depends(get_db),
):
    db_registration = await registration_engine.update_registration_status(db, registration_id, caller, update.status)
    return ApiResponse(
        message=f"Registration status updated to {update.status.value}",
        data=RegistrationRead.model_validate(db_registration),
    )


@router.delete("/{registration_id}", response_model=ApiResponse, response_model_exclude_none=True)
async def cancel_registration(
    registration_id: int, caller: Caller = Depends(get_current_caller), db: AsyncSession = Depends(get_db)
):
    await registration_engine.cancel_registration(db, registration_id, caller)
    return ApiResponse(message="Registration cancelled successfully")
