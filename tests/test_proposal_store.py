import pytest
from sqlalchemy import func, select

from campus_events.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from campus_events.models.event import Event
from campus_events.models.proposal import Proposal, ProposalStatus
from campus_events.services import proposal_store

from conftest import proposal_data

pytestmark = pytest.mark.anyio


async def test_society_submits_pending_proposal(db, callers, users):
    proposal = await proposal_store.submit_proposal(db, callers.society, proposal_data())

    assert proposal.id is not None
    assert proposal.society_id == users.society.id
    assert proposal.status == ProposalStatus.PENDING.value
    assert proposal.reviewed_at is None
    assert proposal.submitted_at is not None


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"event_name": "   "}, "All fields are required"),
        ({"details": ""}, "All fields are required"),
        ({"budget": 0}, "Budget must be greater than zero"),
        ({"budget": -50}, "Budget must be greater than zero"),
    ],
)
async def test_invalid_submission_is_rejected(db, callers, overrides, message):
    with pytest.raises(ValidationError, match=message):
        await proposal_store.submit_proposal(db, callers.society, proposal_data(**overrides))

    assert await db.scalar(select(func.count(Proposal.id))) == 0


async def test_only_societies_submit_proposals(db, callers):
    with pytest.raises(AuthorizationError):
        await proposal_store.submit_proposal(db, callers.student, proposal_data())
    with pytest.raises(AuthorizationError):
        await proposal_store.submit_proposal(db, callers.admin, proposal_data())


async def test_admin_lists_every_proposal_with_society_contact(db, callers):
    await proposal_store.submit_proposal(db, callers.society, proposal_data(event_name="Tech Fest"))
    await proposal_store.submit_proposal(db, callers.other_society, proposal_data(event_name="Spring Play"))

    proposals = await proposal_store.list_proposals(db, callers.admin)

    assert {p.event_name for p in proposals} == {"Tech Fest", "Spring Play"}
    by_name = {p.event_name: p for p in proposals}
    assert by_name["Tech Fest"].society_name == "Tech Society"
    assert by_name["Tech Fest"].society_email == "tech@campus.edu"
    assert by_name["Spring Play"].society_name == "Drama Club"


async def test_society_only_sees_its_own_proposals(db, callers):
    await proposal_store.submit_proposal(db, callers.society, proposal_data(event_name="Tech Fest"))
    await proposal_store.submit_proposal(db, callers.other_society, proposal_data(event_name="Spring Play"))

    proposals = await proposal_store.list_proposals(db, callers.other_society)

    assert [p.event_name for p in proposals] == ["Spring Play"]


async def test_students_cannot_list_proposals(db, callers):
    with pytest.raises(AuthorizationError):
        await proposal_store.list_proposals(db, callers.student)


async def test_list_filters_by_status(db, callers, pending_proposal, approved_event):
    await proposal_store.submit_proposal(db, callers.society, proposal_data(event_name="Hackathon"))

    pending = await proposal_store.list_proposals(db, callers.admin, ProposalStatus.PENDING)
    approved = await proposal_store.list_proposals(db, callers.admin, ProposalStatus.APPROVED)

    assert [p.event_name for p in pending] == ["Hackathon"]
    assert [p.id for p in approved] == [pending_proposal]


async def test_get_proposal_is_limited_to_owner_and_admin(db, callers, pending_proposal):
    own = await proposal_store.get_proposal(db, pending_proposal, callers.society)
    assert own.event_name == "Tech Fest"

    as_admin = await proposal_store.get_proposal(db, pending_proposal, callers.admin)
    assert as_admin.society_name == "Tech Society"

    with pytest.raises(AuthorizationError):
        await proposal_store.get_proposal(db, pending_proposal, callers.other_society)
    with pytest.raises(AuthorizationError):
        await proposal_store.get_proposal(db, pending_proposal, callers.student)


async def test_get_missing_proposal(db, callers):
    with pytest.raises(NotFoundError):
        await proposal_store.get_proposal(db, 999, callers.admin)


async def test_owner_withdraws_pending_proposal(db, callers, pending_proposal):
    await proposal_store.delete_proposal(db, pending_proposal, callers.society)

    assert await db.get(Proposal, pending_proposal) is None


async def test_other_society_cannot_withdraw(db, callers, pending_proposal):
    with pytest.raises(AuthorizationError):
        await proposal_store.delete_proposal(db, pending_proposal, callers.other_society)
    with pytest.raises(AuthorizationError):
        await proposal_store.delete_proposal(db, pending_proposal, callers.admin)


async def test_processed_proposal_cannot_be_withdrawn(session_factory, callers, pending_proposal, approved_event):
    async with session_factory() as session:
        with pytest.raises(ConflictError, match="Cannot delete processed proposals"):
            await proposal_store.delete_proposal(session, pending_proposal, callers.society)

    async with session_factory() as session:
        assert await session.get(Proposal, pending_proposal) is not None
        assert await session.get(Event, approved_event) is not None


async def test_withdraw_missing_proposal(db, callers):
    with pytest.raises(NotFoundError):
        await proposal_store.delete_proposal(db, 42, callers.society)
