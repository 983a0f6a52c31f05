# -*- coding: utf-8 -*-
"""
Student sign-ups against an event's capacity.

``events.current_participants`` counts the seats held by non-cancelled
registrations. It is only moved by the operations in this module, always in
the same transaction as the registration change that justifies it:

* registering takes a seat with a conditional increment
  (``current_participants < max_participants``), so concurrent sign-ups can
  never overbook;
* cancelling removes the registration and gives the seat back;
* a status change into ``cancelled`` gives the seat back, and a change out
  of ``cancelled`` takes one again (capacity checked).
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.database import transaction
from campus_events.exceptions import (
    AuthorizationError,
    CapacityError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from campus_events.models.event import Event, EventStatus
from campus_events.models.registration import Registration, RegistrationStatus
from campus_events.permissions import Caller, Role, require_role, require_self_or_admin, require_society_owner_or_admin
from campus_events.schemas.registration import MyRegistrationRead, RegistrationCreate, RegistrationRead

logger = logging.getLogger(__name__)

ACTIVE = Registration.status != RegistrationStatus.CANCELLED.value


async def _take_seat(db: AsyncSession, event_id: int, upcoming_only: bool = True) -> bool:
    conditions = [Event.id == event_id, Event.current_participants < Event.max_participants]
    if upcoming_only:
        conditions.append(Event.status == EventStatus.UPCOMING.value)
    result = await db.execute(
        update(Event)
        .where(*conditions)
        .values(current_participants=Event.current_participants + 1)
    )
    return result.rowcount == 1


async def _release_seat(db: AsyncSession, event_id: int) -> None:
    await db.execute(
        update(Event)
        .where(Event.id == event_id, Event.current_participants > 0)
        .values(current_participants=Event.current_participants - 1)
    )


async def _has_active_registration(db: AsyncSession, student_id: int, event_id: int, exclude_id: int = None) -> bool:
    query = select(Registration.id).where(
        Registration.student_id == student_id, Registration.event_id == event_id, ACTIVE
    )
    if exclude_id is not None:
        query = query.where(Registration.id != exclude_id)
    return (await db.scalar(query.limit(1))) is not None


def _validate_contact(data: RegistrationCreate) -> None:
    for value in (data.full_name, data.email, data.phone):
        if value is None or not str(value).strip():
            raise ValidationError("Please provide all required fields")


async def register(db: AsyncSession, caller: Caller, data: RegistrationCreate) -> Registration:
    require_role(caller, Role.STUDENT)
    _validate_contact(data)

    async with transaction(db):
        if await _has_active_registration(db, caller.user_id, data.event_id):
            raise ConflictError("Already registered for this event")

        db_event = await db.get(Event, data.event_id)
        if db_event is None:
            raise NotFoundError("Event not found")
        if db_event.status != EventStatus.UPCOMING.value:
            raise ConflictError("Event is not open for registration")
        if db_event.current_participants >= db_event.max_participants:
            raise CapacityError("Event is full")

        # The read above may already be stale; the guarded increment decides
        if not await _take_seat(db, data.event_id):
            raise CapacityError("Event is full")

        registration = Registration(
            student_id=caller.user_id,
            event_id=data.event_id,
            full_name=data.full_name.strip(),
            email=str(data.email),
            phone=data.phone.strip(),
            payment_screenshot_ref=data.payment_screenshot_ref,
            status=RegistrationStatus.REGISTERED.value,
        )
        db.add(registration)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race against the same student's other sign-up
            raise ConflictError("Already registered for this event")

    logger.info("Student %s registered for event %s (registration %s)", caller.user_id, data.event_id, registration.id)
    return registration


async def list_my_registrations(db: AsyncSession, caller: Caller) -> List[MyRegistrationRead]:
    require_role(caller, Role.STUDENT)
    result = await db.execute(
        select(Registration, Event)
        .join(Event, Registration.event_id == Event.id)
        .where(Registration.student_id == caller.user_id)
        .order_by(Event.date.desc(), Registration.registered_at.desc())
    )
    registrations = []
    for registration, db_event in result.all():
        registrations.append(
            MyRegistrationRead(
                **RegistrationRead.model_validate(registration).model_dump(),
                event_name=db_event.name,
                society_name=db_event.society_name,
                venue=db_event.venue,
                event_date=db_event.date,
                time_slot=db_event.time_slot,
                description=db_event.description,
                event_status=db_event.status,
            )
        )
    return registrations


async def list_event_registrations(db: AsyncSession, event_id: int, caller: Caller) -> List[Registration]:
    require_role(caller, Role.ADMIN, Role.SOCIETY)
    db_event = await db.get(Event, event_id)
    if db_event is None:
        raise NotFoundError("Event not found")
    require_society_owner_or_admin(caller, db_event.society_id, "Not authorized to view registrations for this event")

    result = await db.execute(
        select(Registration)
        .where(Registration.event_id == event_id)
        .order_by(Registration.registered_at.desc(), Registration.id.desc())
    )
    return list(result.scalars().all())


async def cancel_registration(
    db: AsyncSession, registration_id: int, caller: Caller, today: Optional[date] = None
) -> None:
    """Removes the registration and frees its seat; only before the event day."""
    today = today or date.today()

    async with transaction(db):
        registration = await db.get(Registration, registration_id)
        if registration is None:
            raise NotFoundError("Registration not found")
        require_self_or_admin(caller, registration.student_id, "Not authorized to cancel this registration")

        db_event = await db.get(Event, registration.event_id)
        if db_event.date <= today:
            raise ConflictError("Cannot cancel registration for past events")

        status_seen = registration.status
        result = await db.execute(
            delete(Registration).where(Registration.id == registration_id, Registration.status == status_seen)
        )
        if result.rowcount == 0:
            raise ConflictError("Registration was changed by another request")
        if status_seen != RegistrationStatus.CANCELLED.value:
            await _release_seat(db, registration.event_id)

    logger.info("Registration %s cancelled by %s %s", registration_id, caller.role.value, caller.user_id)


async def update_registration_status(
    db: AsyncSession, registration_id: int, caller: Caller, new_status: RegistrationStatus
) -> Registration:
    try:
        new_status = RegistrationStatus(new_status)
    except ValueError:
        raise ValidationError("Invalid status")
    require_role(caller, Role.ADMIN, Role.SOCIETY)

    async with transaction(db):
        result = await db.execute(
            select(Registration, Event.society_id)
            .join(Event, Registration.event_id == Event.id)
            .where(Registration.id == registration_id)
        )
        row = result.first()
        if row is None:
            raise NotFoundError("Registration not found")
        registration, society_id = row
        require_society_owner_or_admin(caller, society_id, "Not authorized to update this registration")

        old_status = RegistrationStatus(registration.status)
        if old_status == new_status:
            return registration

        cancelled = RegistrationStatus.CANCELLED
        if old_status != cancelled and new_status == cancelled:
            await _set_status(db, registration_id, old_status, new_status)
            await _release_seat(db, registration.event_id)
        elif old_status == cancelled:
            if await _has_active_registration(db, registration.student_id, registration.event_id, registration_id):
                raise ConflictError("Student already holds a registration for this event")
            if not await _take_seat(db, registration.event_id, upcoming_only=False):
                raise CapacityError("Event is full")
            await _set_status(db, registration_id, old_status, new_status)
        else:
            await _set_status(db, registration_id, old_status, new_status)

        await db.refresh(registration)

    logger.info(
        "Registration %s moved from %s to %s by %s %s",
        registration_id, old_status.value, new_status.value, caller.role.value, caller.user_id,
    )
    return registration


async def _set_status(
    db: AsyncSession, registration_id: int, expected: RegistrationStatus, new_status: RegistrationStatus
) -> None:
    result = await db.execute(
        update(Registration)
        .where(Registration.id == registration_id, Registration.status == expected.value)
        .values(status=new_status.value)
    )
    if result.rowcount == 0:
        raise ConflictError("Registration was changed by another request")
