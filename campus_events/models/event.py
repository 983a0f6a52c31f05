# campus_events/models/event.py
from enum import Enum

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from campus_events.database import Base


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint(
            "current_participants >= 0 AND current_participants <= max_participants",
            name="ck_events_participants_within_capacity",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Null for events that did not come from a proposal
    proposal_id = Column(Integer, ForeignKey("proposals.id"), unique=True, nullable=True)
    society_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    society_name = Column(String(150), nullable=True)
    name = Column(String(200), nullable=False)
    venue = Column(String(200), nullable=False)
    date = Column(Date, nullable=False, index=True)
    time_slot = Column(String(50), nullable=False)
    budget = Column(Float, nullable=False, default=0.0)
    description = Column(Text, nullable=True)
    max_participants = Column(Integer, nullable=False, default=100)
    current_participants = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=EventStatus.UPCOMING.value, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    proposal = relationship("Proposal", back_populates="event")
    registrations = relationship("Registration", back_populates="event", passive_deletes=True)

    @property
    def available_seats(self) -> int:
        return self.max_participants - self.current_participants
