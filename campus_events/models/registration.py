# campus_events/models/registration.py
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import relationship
from datetime import datetime

from campus_events.database import Base


class RegistrationStatus(str, Enum):
    REGISTERED = "registered"
    ATTENDED = "attended"
    MISSED = "missed"
    CANCELLED = "cancelled"


class Registration(Base):
    __tablename__ = "registrations"
    __table_args__ = (
        # At most one non-cancelled registration per student and event
        Index(
            "uq_registrations_active_student_event",
            "student_id",
            "event_id",
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    full_name = Column(String(150), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=False)
    # Only a reference to the uploaded screenshot is kept
    payment_screenshot_ref = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=RegistrationStatus.REGISTERED.value)
    registered_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    event = relationship("Event", back_populates="registrations")
