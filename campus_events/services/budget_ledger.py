# -*- coding: utf-8 -*-
"""
Monthly budget pool.

One row per calendar month, created on first access with the configured
default total and a bcrypt hash of the configured default PIN. Changing the
total requires the PIN. ``remaining_budget`` is always ``total - allocated``;
``allocated_budget`` only changes through ``reconcile_budget``.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from campus_events import config
from campus_events.auth import hash_secret, verify_secret
from campus_events.database import transaction
from campus_events.exceptions import AuthenticationError, ConflictError, ValidationError
from campus_events.models.budget import BudgetSetting
from campus_events.models.proposal import Proposal, ProposalStatus
from campus_events.permissions import Caller, Role, require_role

logger = logging.getLogger(__name__)

INVALID_PIN_MESSAGE = "Invalid PIN"


class _MonthCreatedConcurrently(ConflictError):
    pass


def current_month() -> str:
    return date.today().strftime("%Y-%m")


def parse_month(month: str) -> date:
    """Returns the first day of a ``YYYY-MM`` month."""
    try:
        year, month_number = month.split("-")
        first_day = date(int(year), int(month_number), 1)
    except (AttributeError, ValueError):
        raise ValidationError("Month must use the YYYY-MM format")
    # "2026-1" would otherwise key a second row for the same month
    if first_day.strftime("%Y-%m") != month:
        raise ValidationError("Month must use the YYYY-MM format")
    return first_day


def _next_month(first_day: date) -> date:
    if first_day.month == 12:
        return date(first_day.year + 1, 1, 1)
    return date(first_day.year, first_day.month + 1, 1)


async def _get_or_create(db: AsyncSession, month: str, caller: Caller) -> BudgetSetting:
    setting = await db.get(BudgetSetting, month)
    if setting is not None:
        return setting

    total = config.DEFAULT_MONTHLY_BUDGET
    setting = BudgetSetting(
        month_year=month,
        total_budget=total,
        allocated_budget=0.0,
        remaining_budget=total,
        pin_hash=await run_in_threadpool(hash_secret, str(config.DEFAULT_BUDGET_PIN)),
        updated_by=caller.user_id,
    )
    db.add(setting)
    try:
        await db.flush()
    except IntegrityError:
        raise _MonthCreatedConcurrently("Budget month created concurrently")
    logger.info("Budget for %s initialised with default total %.2f", month, total)
    return setting


async def get_budget(db: AsyncSession, caller: Caller, month: Optional[str] = None) -> BudgetSetting:
    require_role(caller, Role.ADMIN)
    month = month or current_month()
    parse_month(month)

    try:
        async with transaction(db):
            setting = await _get_or_create(db, month, caller)
    except _MonthCreatedConcurrently:
        # Another request created the row first; theirs is as good as ours
        setting = await db.get(BudgetSetting, month)
    return setting


async def update_budget(
    db: AsyncSession, caller: Caller, new_total: float, pin: str, month: Optional[str] = None
) -> BudgetSetting:
    require_role(caller, Role.ADMIN)
    if new_total is None or not pin:
        raise ValidationError("New budget amount and PIN are required")
    if new_total <= 0:
        raise ValidationError("Budget must be greater than zero")
    month = month or current_month()
    parse_month(month)

    try:
        setting = await _set_total(db, caller, month, new_total, pin)
    except _MonthCreatedConcurrently:
        # The row now exists; the PIN is checked against it on the second pass
        setting = await _set_total(db, caller, month, new_total, pin)

    logger.info("Budget for %s set to %.2f by admin %s", month, new_total, caller.user_id)
    return setting


async def _set_total(db: AsyncSession, caller: Caller, month: str, new_total: float, pin: str) -> BudgetSetting:
    async with transaction(db):
        setting = await _get_or_create(db, month, caller)
        # bcrypt is CPU bound; keep it off the event loop
        if not await run_in_threadpool(verify_secret, pin, setting.pin_hash):
            logger.warning("Rejected budget update for %s by admin %s: wrong PIN", month, caller.user_id)
            raise AuthenticationError(INVALID_PIN_MESSAGE)

        await db.execute(
            update(BudgetSetting)
            .where(BudgetSetting.month_year == month)
            .values(
                total_budget=new_total,
                remaining_budget=new_total - BudgetSetting.allocated_budget,
                updated_by=caller.user_id,
            )
            .execution_options(synchronize_session="fetch")
        )
        await db.refresh(setting)
    return setting


async def reconcile_budget(db: AsyncSession, caller: Caller, month: Optional[str] = None) -> BudgetSetting:
    """Recomputes the allocated amount from the approved proposals dated in the month."""
    require_role(caller, Role.ADMIN)
    month = month or current_month()
    first_day = parse_month(month)

    try:
        setting = await _reconcile(db, caller, month, first_day)
    except _MonthCreatedConcurrently:
        setting = await _reconcile(db, caller, month, first_day)

    logger.info("Budget for %s reconciled: allocated %.2f", month, setting.allocated_budget)
    return setting


async def _reconcile(db: AsyncSession, caller: Caller, month: str, first_day: date) -> BudgetSetting:
    async with transaction(db):
        setting = await _get_or_create(db, month, caller)
        allocated = await db.scalar(
            select(func.coalesce(func.sum(Proposal.budget), 0.0)).where(
                Proposal.status == ProposalStatus.APPROVED.value,
                Proposal.requested_date >= first_day,
                Proposal.requested_date < _next_month(first_day),
            )
        )
        setting.allocated_budget = float(allocated)
        setting.remaining_budget = setting.total_budget - setting.allocated_budget
        setting.updated_by = caller.user_id
        await db.flush()
    return setting
