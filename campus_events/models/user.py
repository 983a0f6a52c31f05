# campus_events/models/user.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from datetime import datetime

from campus_events.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(150), nullable=False)
    role = Column(String(20), nullable=False)  # admin, society, student
    # Display name used on events; only filled in for societies
    society_name = Column(String(150), nullable=True)
    phone_number = Column(String(30), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    proposals = relationship("Proposal", back_populates="society", foreign_keys="Proposal.society_id")
