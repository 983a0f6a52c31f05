# campus_events/models/proposal.py
from enum import Enum

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from campus_events.database import Base


class ProposalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Proposal(Base):
    __tablename__ = "proposals"

    id = Column(Integer, primary_key=True, index=True)
    society_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_name = Column(String(200), nullable=False)
    venue = Column(String(200), nullable=False)
    requested_date = Column(Date, nullable=False)
    time_slot = Column(String(50), nullable=False)
    budget = Column(Float, nullable=False)
    details = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=ProposalStatus.PENDING.value, index=True)
    rejection_reason = Column(Text, nullable=True)
    submitted_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    # Audit fields, stamped when an admin reviews the proposal
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    society = relationship("User", back_populates="proposals", foreign_keys=[society_id])
    event = relationship("Event", back_populates="proposal", uselist=False)
