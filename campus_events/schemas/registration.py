# -*- coding: utf-8 -*-
"""
Pydantic schemas for event registrations.
"""

from pydantic import BaseModel, EmailStr, Field
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import date, datetime

from campus_events.models.event import EventStatus
from campus_events.models.registration import RegistrationStatus


class RegistrationCreate(BaseModel):
    event_id: int = Field(..., alias="eventId")
    full_name: str = Field(..., alias="fullName", max_length=150)
    email: EmailStr
    phone: str = Field(..., alias="phoneNumber", max_length=30)
    payment_screenshot_ref: Optional[str] = Field(None, alias="paymentScreenshot", max_length=500)

    class Config:
        populate_by_name = True


class RegistrationStatusUpdate(BaseModel):
    status: RegistrationStatus


class RegistrationRead(BaseModel):
    id: int
    student_id: int
    event_id: int
    full_name: str
    email: str
    phone: str
    payment_screenshot_ref: Optional[str] = None
    status: RegistrationStatus
    registered_at: datetime

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel


class MyRegistrationRead(RegistrationRead):
    event_name: str
    society_name: Optional[str] = None
    venue: str
    event_date: date
    time_slot: str
    description: Optional[str] = None
    event_status: EventStatus


class RegistrationCreated(BaseModel):
    registration_id: int = Field(..., alias="registrationId")

    class Config:
        populate_by_name = True
