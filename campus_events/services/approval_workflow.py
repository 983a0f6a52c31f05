# -*- coding: utf-8 -*-
"""
Review of pending proposals.

``pending`` moves to ``approved`` or ``rejected`` and never moves again. The
move is a conditional UPDATE guarded on ``status = 'pending'``; when it
touches no row another reviewer got there first and the caller gets a
ConflictError. Approval also creates the proposal's Event in the same
transaction, so an approved proposal without its event is never visible.
"""

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events import config
from campus_events.database import transaction
from campus_events.exceptions import ConflictError, NotFoundError, ValidationError
from campus_events.models.event import Event, EventStatus
from campus_events.models.proposal import Proposal, ProposalStatus
from campus_events.models.user import User
from campus_events.permissions import Caller, Role, require_role

logger = logging.getLogger(__name__)


async def _transition(db: AsyncSession, proposal_id: int, target: ProposalStatus, reviewer: Caller, **values) -> None:
    """Moves a pending proposal to ``target``; raises ConflictError when it is no longer pending."""
    result = await db.execute(
        update(Proposal)
        .where(Proposal.id == proposal_id, Proposal.status == ProposalStatus.PENDING.value)
        .values(status=target.value, reviewed_at=datetime.utcnow(), reviewed_by=reviewer.user_id, **values)
    )
    if result.rowcount == 0:
        raise ConflictError("Proposal already processed")


async def approve_proposal(db: AsyncSession, proposal_id: int, reviewer: Caller) -> dict:
    require_role(reviewer, Role.ADMIN)

    async with transaction(db):
        proposal = await db.get(Proposal, proposal_id)
        if proposal is None:
            raise NotFoundError("Proposal not found")
        if proposal.status != ProposalStatus.PENDING.value:
            raise ConflictError("Proposal already processed")

        await _transition(db, proposal_id, ProposalStatus.APPROVED, reviewer)

        society_name = await db.scalar(select(User.society_name).where(User.id == proposal.society_id))

        new_event = Event(
            proposal_id=proposal.id,
            society_id=proposal.society_id,
            society_name=society_name,
            name=proposal.event_name,
            venue=proposal.venue,
            date=proposal.requested_date,
            time_slot=proposal.time_slot,
            budget=proposal.budget,
            description=proposal.details,
            max_participants=config.DEFAULT_MAX_PARTICIPANTS,
            current_participants=0,
            status=EventStatus.UPCOMING.value,
        )
        db.add(new_event)
        await db.flush()

    logger.info(
        "Proposal %s approved by admin %s; event %s created", proposal_id, reviewer.user_id, new_event.id
    )
    return {"proposal_id": proposal_id, "event_id": new_event.id}


async def reject_proposal(db: AsyncSession, proposal_id: int, reviewer: Caller, reason: str) -> None:
    require_role(reviewer, Role.ADMIN)
    if reason is None or not reason.strip():
        raise ValidationError("Rejection reason is required")

    async with transaction(db):
        try:
            await _transition(db, proposal_id, ProposalStatus.REJECTED, reviewer, rejection_reason=reason.strip())
        except ConflictError:
            # Zero rows: tell a missing proposal apart from one already reviewed
            exists = await db.scalar(select(Proposal.id).where(Proposal.id == proposal_id))
            if exists is None:
                raise NotFoundError("Proposal not found")
            raise

    logger.info("Proposal %s rejected by admin %s", proposal_id, reviewer.user_id)
