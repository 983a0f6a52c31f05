# -*- coding: utf-8 -*-
"""
Proposal lifecycle: submission, lookup, scoped listing and withdrawal.

Review (approve/reject) lives in ``approval_workflow``.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.database import transaction
from campus_events.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from campus_events.models.proposal import Proposal, ProposalStatus
from campus_events.models.user import User
from campus_events.permissions import Caller, Role, require_role
from campus_events.schemas.proposal import ProposalCreate, ProposalRead

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS = ("event_name", "venue", "time_slot", "details")


def _validate_submission(data: ProposalCreate) -> None:
    for field in REQUIRED_TEXT_FIELDS:
        value = getattr(data, field)
        if value is None or not str(value).strip():
            raise ValidationError("All fields are required")
    if data.requested_date is None or data.budget is None:
        raise ValidationError("All fields are required")
    if data.budget <= 0:
        raise ValidationError("Budget must be greater than zero")


async def submit_proposal(db: AsyncSession, caller: Caller, data: ProposalCreate) -> Proposal:
    require_role(caller, Role.SOCIETY)
    _validate_submission(data)

    async with transaction(db):
        proposal = Proposal(
            society_id=caller.user_id,
            event_name=data.event_name.strip(),
            venue=data.venue.strip(),
            requested_date=data.requested_date,
            time_slot=data.time_slot.strip(),
            budget=data.budget,
            details=data.details.strip(),
            status=ProposalStatus.PENDING.value,
        )
        db.add(proposal)
        await db.flush()

    logger.info("Proposal %s submitted by society %s", proposal.id, caller.user_id)
    return proposal


async def get_proposal(db: AsyncSession, proposal_id: int, caller: Caller) -> ProposalRead:
    result = await db.execute(
        select(Proposal, User.society_name, User.email)
        .join(User, Proposal.society_id == User.id)
        .where(Proposal.id == proposal_id)
    )
    row = result.first()
    if row is None:
        raise NotFoundError("Proposal not found")

    proposal, society_name, society_email = row
    if not caller.is_admin and proposal.society_id != caller.user_id:
        raise AuthorizationError("Not authorized to view this proposal")

    proposal_data = ProposalRead.model_validate(proposal)
    proposal_data.society_name = society_name
    proposal_data.society_email = society_email
    return proposal_data


async def list_proposals(
    db: AsyncSession, caller: Caller, status: Optional[ProposalStatus] = None
) -> List[ProposalRead]:
    """
    Admins see every proposal together with the submitting society's name
    and e-mail; a society sees only its own proposals. Newest first.
    """
    require_role(caller, Role.ADMIN, Role.SOCIETY, message="Not authorized")

    query = select(Proposal, User.society_name, User.email).join(User, Proposal.society_id == User.id)
    if caller.is_society:
        query = query.where(Proposal.society_id == caller.user_id)

    if status is not None:
        query = query.where(Proposal.status == ProposalStatus(status).value)
    query = query.order_by(Proposal.submitted_at.desc(), Proposal.id.desc())

    proposals = []
    for proposal, society_name, society_email in (await db.execute(query)).all():
        proposal_data = ProposalRead.model_validate(proposal)
        proposal_data.society_name = society_name
        proposal_data.society_email = society_email
        proposals.append(proposal_data)
    return proposals


async def delete_proposal(db: AsyncSession, proposal_id: int, caller: Caller) -> None:
    async with transaction(db):
        proposal = await db.get(Proposal, proposal_id)
        if proposal is None:
            raise NotFoundError("Proposal not found")
        if not caller.is_society or proposal.society_id != caller.user_id:
            raise AuthorizationError("Not authorized to delete this proposal")
        if proposal.status != ProposalStatus.PENDING.value:
            raise ConflictError("Cannot delete processed proposals")

        # Guarded on status so a concurrent review wins over the withdrawal
        result = await db.execute(
            delete(Proposal)
            .where(Proposal.id == proposal_id, Proposal.status == ProposalStatus.PENDING.value)
        )
        if result.rowcount == 0:
            raise ConflictError("Cannot delete processed proposals")

    logger.info("Proposal %s withdrawn by society %s", proposal_id, caller.user_id)
