# -*- coding: utf-8 -*-
"""
Pydantic schemas for proposals.
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import date, datetime

from campus_events.models.proposal import ProposalStatus


class ProposalCreate(BaseModel):
    event_name: str = Field(..., alias="eventName", max_length=200)
    venue: str = Field(..., max_length=200)
    requested_date: date = Field(..., alias="requestedDate")
    time_slot: str = Field(..., alias="timeSlot", max_length=50)
    budget: float
    details: str = Field(..., alias="proposalDetails")

    class Config:
        populate_by_name = True


class ProposalRejection(BaseModel):
    rejection_reason: Optional[str] = Field(None, alias="rejectionReason")

    class Config:
        populate_by_name = True


class ProposalRead(BaseModel):
    id: int
    society_id: int
    event_name: str
    venue: str
    requested_date: date
    time_slot: str
    budget: float
    details: str
    status: ProposalStatus
    rejection_reason: Optional[str] = None
    submitted_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    # Filled in on the admin listing
    society_name: Optional[str] = None
    society_email: Optional[str] = None

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel


class ProposalSubmitted(BaseModel):
    proposal_id: int = Field(..., alias="proposalId")

    class Config:
        populate_by_name = True


class ApprovalResult(BaseModel):
    proposal_id: int = Field(..., alias="proposalId")
    event_id: int = Field(..., alias="eventId")

    class Config:
        populate_by_name = True
