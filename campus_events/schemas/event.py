# -*- coding: utf-8 -*-
"""
Pydantic schemas for events.
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Dict, Optional
from datetime import date as Date, datetime

from campus_events.models.event import EventStatus


class EventRead(BaseModel):
    id: int
    proposal_id: Optional[int] = None
    society_id: int
    society_name: Optional[str] = None
    name: str
    venue: str
    date: Date
    time_slot: str
    budget: float
    description: Optional[str] = None
    max_participants: int
    current_participants: int
    available_seats: int
    status: EventStatus
    created_at: Optional[datetime] = None
    total_registrations: Optional[int] = None

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel


class EventDetail(EventRead):
    society_email: Optional[str] = None
    society_phone: Optional[str] = None
    registration_stats: Dict[str, int] = {}


class EventUpdate(BaseModel):
    name: Optional[str] = Field(None, alias="eventName", min_length=1, max_length=200)
    venue: Optional[str] = Field(None, min_length=1, max_length=200)
    date: Optional[Date] = Field(None, alias="eventDate")
    time_slot: Optional[str] = Field(None, alias="timeSlot", min_length=1, max_length=50)
    description: Optional[str] = None
    max_participants: Optional[int] = Field(None, alias="maxParticipants", ge=1)
    status: Optional[EventStatus] = None

    class Config:
        populate_by_name = True


class EventStats(BaseModel):
    event_id: int = Field(..., alias="eventId")
    max_participants: int = Field(..., alias="maxParticipants")
    current_participants: int = Field(..., alias="currentParticipants")
    available_seats: int = Field(..., alias="availableSeats")
    total_registrations: int = 0
    registered: int = 0
    attended: int = 0
    missed: int = 0
    cancelled: int = 0

    class Config:
        populate_by_name = True
        alias_generator = to_camel
