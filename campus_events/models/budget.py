# campus_events/models/budget.py
from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from datetime import datetime

from campus_events.database import Base


class BudgetSetting(Base):
    __tablename__ = "budget_settings"

    month_year = Column(String(7), primary_key=True)  # YYYY-MM
    total_budget = Column(Float, nullable=False)
    allocated_budget = Column(Float, nullable=False, default=0.0)
    remaining_budget = Column(Float, nullable=False)
    pin_hash = Column(String(255), nullable=False)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
