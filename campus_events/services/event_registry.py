# -*- coding: utf-8 -*-
"""
Events created from approved proposals: listings, detail, edits and stats.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import case, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.database import transaction
from campus_events.exceptions import NotFoundError, ValidationError
from campus_events.models.event import Event, EventStatus
from campus_events.models.registration import Registration, RegistrationStatus
from campus_events.models.user import User
from campus_events.permissions import Caller, Role, require_role, require_society_owner_or_admin
from campus_events.schemas.event import EventDetail, EventRead, EventStats, EventUpdate

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "venue", "date", "time_slot", "description", "max_participants", "status")


def _with_registration_totals():
    total_registrations = func.count(Registration.id).label("total_registrations")
    return (
        select(Event, total_registrations)
        .outerjoin(Registration, Registration.event_id == Event.id)
        .group_by(Event.id)
    )


def _annotated(rows) -> List[EventRead]:
    events = []
    for db_event, total_registrations in rows:
        event_data = EventRead.model_validate(db_event)
        event_data.total_registrations = total_registrations
        events.append(event_data)
    return events


async def list_upcoming_events(db: AsyncSession, today: Optional[date] = None) -> List[EventRead]:
    today = today or date.today()
    query = (
        _with_registration_totals()
        .where(Event.status == EventStatus.UPCOMING.value, Event.date >= today)
        .order_by(Event.date.asc(), Event.time_slot.asc())
    )
    return _annotated((await db.execute(query)).all())


async def list_events(
    db: AsyncSession,
    status: Optional[EventStatus] = None,
    society_id: Optional[int] = None,
    search: Optional[str] = None,
) -> List[EventRead]:
    query = _with_registration_totals()
    if status is not None:
        query = query.where(Event.status == EventStatus(status).value)
    if society_id is not None:
        query = query.where(Event.society_id == society_id)
    if search:
        term = f"%{search}%"
        query = query.where(
            or_(Event.name.ilike(term), Event.society_name.ilike(term), Event.description.ilike(term))
        )
    query = query.order_by(Event.date.desc(), Event.id.desc())
    return _annotated((await db.execute(query)).all())


async def _registration_counts(db: AsyncSession, event_id: int) -> Dict[str, int]:
    result = await db.execute(
        select(Registration.status, func.count(Registration.id))
        .where(Registration.event_id == event_id)
        .group_by(Registration.status)
    )
    return {status: count for status, count in result.all()}


async def get_event(db: AsyncSession, event_id: int) -> EventDetail:
    result = await db.execute(
        select(Event, User.email, User.phone_number)
        .outerjoin(User, Event.society_id == User.id)
        .where(Event.id == event_id)
    )
    row = result.first()
    if row is None:
        raise NotFoundError("Event not found")

    db_event, society_email, society_phone = row
    stats = await _registration_counts(db, event_id)

    event_data = EventDetail.model_validate(db_event)
    event_data.society_email = society_email
    event_data.society_phone = society_phone
    event_data.registration_stats = stats
    event_data.total_registrations = sum(stats.values())
    return event_data


async def _load_event(db: AsyncSession, event_id: int) -> Event:
    db_event = await db.get(Event, event_id)
    if db_event is None:
        raise NotFoundError("Event not found")
    return db_event


async def update_event(db: AsyncSession, event_id: int, data: EventUpdate, caller: Caller) -> Event:
    """Partial update by an admin or the society that owns the event."""
    update_data = {
        key: value for key, value in data.model_dump(exclude_unset=True).items()
        if key in EDITABLE_FIELDS and value is not None
    }

    async with transaction(db):
        db_event = await _load_event(db, event_id)
        require_society_owner_or_admin(caller, db_event.society_id, "Not authorized to update this event")
        if not update_data:
            raise ValidationError("No fields to update")
        if "status" in update_data:
            update_data["status"] = EventStatus(update_data["status"]).value

        query = update(Event).where(Event.id == event_id).values(**update_data)
        if "max_participants" in update_data:
            # Capacity can't drop below the seats already taken
            query = query.where(Event.current_participants <= update_data["max_participants"])
        result = await db.execute(query)
        if result.rowcount == 0:
            raise ValidationError("Maximum participants cannot be lower than current participants")
        await db.refresh(db_event)

    logger.info("Event %s updated by %s %s: %s", event_id, caller.role.value, caller.user_id, sorted(update_data))
    return db_event


async def delete_event(db: AsyncSession, event_id: int, caller: Caller) -> None:
    require_role(caller, Role.ADMIN)

    async with transaction(db):
        await _load_event(db, event_id)
        await db.execute(delete(Registration).where(Registration.event_id == event_id))
        await db.execute(delete(Event).where(Event.id == event_id))

    logger.info("Event %s deleted by admin %s", event_id, caller.user_id)


async def get_event_stats(db: AsyncSession, event_id: int, caller: Caller) -> EventStats:
    db_event = await _load_event(db, event_id)
    require_society_owner_or_admin(caller, db_event.society_id)

    def count_of(status: RegistrationStatus):
        return func.coalesce(func.sum(case((Registration.status == status.value, 1), else_=0)), 0)

    result = await db.execute(
        select(
            func.count(Registration.id),
            count_of(RegistrationStatus.REGISTERED),
            count_of(RegistrationStatus.ATTENDED),
            count_of(RegistrationStatus.MISSED),
            count_of(RegistrationStatus.CANCELLED),
        ).where(Registration.event_id == event_id)
    )
    total, registered, attended, missed, cancelled = result.one()

    return EventStats(
        event_id=db_event.id,
        max_participants=db_event.max_participants,
        current_participants=db_event.current_participants,
        available_seats=db_event.available_seats,
        total_registrations=total,
        registered=registered,
        attended=attended,
        missed=missed,
        cancelled=cancelled,
    )
