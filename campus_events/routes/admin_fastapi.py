# campus_events/routes/admin_fastapi.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.auth import get_admin_caller
from campus_events.database import get_db
from campus_events.permissions import Caller
from campus_events.schemas.budget import BudgetRead, BudgetUpdate
from campus_events.schemas.common import ApiResponse
from campus_events.services import budget_ledger

router = APIRouter(
    tags=["Admin"],
    dependencies=[Depends(get_admin_caller)],
)

MONTH_PATTERN = r"^\d{4}-\d{2}$"


@router.get("/budget", response_model=ApiResponse[BudgetRead], response_model_exclude_none=True)
async def read_budget(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    caller: Caller = Depends(get_admin_caller),
    db: AsyncSession = Depends(get_db),
):
    setting = await budget_ledger.get_budget(db, caller, month)
    return ApiResponse(data=BudgetRead.model_validate(setting))


@router.put("/budget", response_model=ApiResponse[BudgetRead], response_model_exclude_none=True)
async def update_budget(
    budget: BudgetUpdate,
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    caller: Caller = Depends(get_admin_caller),
    db: AsyncSession = Depends(get_db),
):
    setting = await budget_ledger.update_budget(db, caller, budget.new_budget, budget.pin, month)
    return ApiResponse(message="Budget updated successfully", data=BudgetRead.model_validate(setting))


@router.post("/budget/reconcile", response_model=ApiResponse[BudgetRead], response_model_exclude_none=True)
async def reconcile_budget(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    caller: Caller = Depends(get_admin_caller),
    db: AsyncSession = Depends(get_db),
):
    setting = await budget_ledger.reconcile_budget(db, caller, month)
    return ApiResponse(message="Budget reconciled with approved proposals", data=BudgetRead.model_validate(setting))
