import asyncio
from datetime import date

import pytest

from campus_events import config
from campus_events.exceptions import AuthenticationError, AuthorizationError, ValidationError
from campus_events.models.budget import BudgetSetting
from campus_events.services import approval_workflow, budget_ledger, proposal_store

from conftest import proposal_data

pytestmark = pytest.mark.anyio

DEFAULT_PIN = str(config.DEFAULT_BUDGET_PIN)


async def test_first_read_initialises_month_with_defaults(db, callers):
    setting = await budget_ledger.get_budget(db, callers.admin)

    assert setting.month_year == date.today().strftime("%Y-%m")
    assert setting.total_budget == config.DEFAULT_MONTHLY_BUDGET
    assert setting.allocated_budget == 0
    assert setting.remaining_budget == config.DEFAULT_MONTHLY_BUDGET
    assert setting.pin_hash != DEFAULT_PIN


async def test_reads_return_the_same_month_row(session_factory, callers):
    async with session_factory() as session:
        first = await budget_ledger.get_budget(session, callers.admin, "2025-03")
    async with session_factory() as session:
        second = await budget_ledger.get_budget(session, callers.admin, "2025-03")

    assert first.month_year == second.month_year == "2025-03"
    assert first.pin_hash == second.pin_hash


async def test_update_with_correct_pin(session_factory, callers, users):
    async with session_factory() as session:
        setting = await budget_ledger.update_budget(session, callers.admin, 75000, DEFAULT_PIN)

    assert setting.total_budget == 75000
    assert setting.remaining_budget == 75000
    assert setting.updated_by == users.admin.id

    async with session_factory() as session:
        stored = await session.get(BudgetSetting, budget_ledger.current_month())
        assert stored.total_budget == 75000
        assert stored.remaining_budget == stored.total_budget - stored.allocated_budget


async def test_wrong_pin_leaves_budget_untouched(session_factory, callers):
    async with session_factory() as session:
        await budget_ledger.get_budget(session, callers.admin)

    async with session_factory() as session:
        with pytest.raises(AuthenticationError, match="Invalid PIN"):
            await budget_ledger.update_budget(session, callers.admin, 1, "0000")

    async with session_factory() as session:
        stored = await session.get(BudgetSetting, budget_ledger.current_month())
        assert stored.total_budget == config.DEFAULT_MONTHLY_BUDGET


async def test_wrong_pin_on_fresh_month_gets_the_same_answer(db, callers):
    with pytest.raises(AuthenticationError, match="Invalid PIN"):
        await budget_ledger.update_budget(db, callers.admin, 1000, "0000", "2031-01")


@pytest.mark.parametrize(
    "new_total, pin",
    [(0, DEFAULT_PIN), (-10, DEFAULT_PIN), (1000, ""), (None, DEFAULT_PIN)],
)
async def test_update_validates_input(db, callers, new_total, pin):
    with pytest.raises(ValidationError):
        await budget_ledger.update_budget(db, callers.admin, new_total, pin)


async def test_budget_is_admin_only(db, callers):
    with pytest.raises(AuthorizationError):
        await budget_ledger.get_budget(db, callers.society)
    with pytest.raises(AuthorizationError):
        await budget_ledger.update_budget(db, callers.student, 1000, DEFAULT_PIN)


@pytest.mark.parametrize("month", ["2025-13", "March", "2025/03", "2026-1", "2026-001"])
async def test_month_must_be_valid(db, callers, month):
    with pytest.raises(ValidationError):
        await budget_ledger.get_budget(db, callers.admin, month)


async def test_reconcile_sums_approved_proposals_in_month(session_factory, callers):
    async with session_factory() as session:
        approved = await proposal_store.submit_proposal(
            session, callers.society, proposal_data(requested_date=date(2030, 5, 10), budget=12000)
        )
    async with session_factory() as session:
        also_approved = await proposal_store.submit_proposal(
            session, callers.other_society, proposal_data(requested_date=date(2030, 5, 31), budget=3000)
        )
    async with session_factory() as session:
        # Pending, and approved-but-next-month, are not allocated
        await proposal_store.submit_proposal(
            session, callers.society, proposal_data(requested_date=date(2030, 5, 20), budget=999)
        )
    async with session_factory() as session:
        next_month = await proposal_store.submit_proposal(
            session, callers.society, proposal_data(requested_date=date(2030, 6, 1), budget=5000)
        )
    for proposal_id in (approved.id, also_approved.id, next_month.id):
        async with session_factory() as session:
            await approval_workflow.approve_proposal(session, proposal_id, callers.admin)

    async with session_factory() as session:
        setting = await budget_ledger.reconcile_budget(session, callers.admin, "2030-05")

    assert setting.allocated_budget == 15000
    assert setting.remaining_budget == config.DEFAULT_MONTHLY_BUDGET - 15000

    async with session_factory() as session:
        updated = await budget_ledger.update_budget(session, callers.admin, 20000, DEFAULT_PIN, "2030-05")
    assert updated.allocated_budget == 15000
    assert updated.remaining_budget == 5000


async def test_first_updates_of_a_month_racing_both_succeed(session_factory, callers):
    async def set_total(new_total):
        async with session_factory() as session:
            return await budget_ledger.update_budget(session, callers.admin, new_total, DEFAULT_PIN, "2031-05")

    outcomes = await asyncio.gather(set_total(60000), set_total(70000), return_exceptions=True)

    assert all(isinstance(o, BudgetSetting) for o in outcomes), outcomes

    async with session_factory() as session:
        stored = await session.get(BudgetSetting, "2031-05")
        assert stored.total_budget in (60000, 70000)
        assert stored.remaining_budget == stored.total_budget
