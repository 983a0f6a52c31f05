# -*- coding: utf-8 -*-
"""
Pydantic schemas for the monthly budget. The PIN hash is never part of a response.
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class BudgetRead(BaseModel):
    month_year: str
    total_budget: float
    allocated_budget: float
    remaining_budget: float
    updated_by: Optional[int] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel


class BudgetUpdate(BaseModel):
    new_budget: float = Field(..., alias="newBudget")
    pin: str

    class Config:
        populate_by_name = True
