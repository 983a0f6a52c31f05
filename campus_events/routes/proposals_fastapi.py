# campus_events/routes/proposals_fastapi.py
from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.auth import get_admin_caller, get_current_caller, require_roles
from campus_events.database import get_db
from campus_events.models.proposal import ProposalStatus
from campus_events.permissions import Caller, Role
from campus_events.schemas.common import ApiResponse
from campus_events.schemas.proposal import (
    ApprovalResult,
    ProposalCreate,
    ProposalRead,
    ProposalRejection,
    ProposalSubmitted,
)
from campus_events.services import approval_workflow, proposal_store

router = APIRouter(
    tags=["Proposals"],
    responses={404: {"description": "Not found"}},
)


@router.post(
    "",
    response_model=ApiResponse[ProposalSubmitted],
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
)
async def submit_proposal(
    proposal: ProposalCreate,
    caller: Caller = Depends(require_roles(Role.SOCIETY)),
    db: AsyncSession = Depends(get_db),
):
    db_proposal = await proposal_store.submit_proposal(db, caller, proposal)
    return ApiResponse(
        message="Proposal submitted successfully",
        data=ProposalSubmitted(proposal_id=db_proposal.id),
    )


@router.get("", response_model=ApiResponse[List[ProposalRead]], response_model_exclude_none=True)
async def read_proposals(
    status: Optional[ProposalStatus] = None,
    caller: Caller = Depends(require_roles(Role.ADMIN, Role.SOCIETY)),
    db: AsyncSession = Depends(get_db),
):
    proposals = await proposal_store.list_proposals(db, caller, status)
    return ApiResponse(count=len(proposals), data=proposals)


@router.get("/{proposal_id}", response_model=ApiResponse[ProposalRead], response_model_exclude_none=True)
async def read_proposal(
    proposal_id: int, caller: Caller = Depends(get_current_caller), db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await proposal_store.get_proposal(db, proposal_id, caller))


@router.put(
    "/{proposal_id}/approve",
    response_model=ApiResponse[ApprovalResult],
    response_model_exclude_none=True,
)
async def approve_proposal(
    proposal_id: int, caller: Caller = Depends(get_admin_caller), db: AsyncSession = Depends(get_db)
):
    result = await approval_workflow.approve_proposal(db, proposal_id, caller)
    return ApiResponse(
        message="Proposal approved and event created successfully",
        data=ApprovalResult(**result),
    )


@router.put("/{proposal_id}/reject", response_model=ApiResponse, response_model_exclude_none=True)
async def reject_proposal(
    proposal_id: int,
    rejection: ProposalRejection,
    caller: Caller = Depends(get_admin_caller),
    db: AsyncSession = Depends(get_db),
):
    await approval_workflow.reject_proposal(db, proposal_id, caller, rejection.rejection_reason)
    return ApiResponse(message="Proposal rejected successfully")


@router.delete("/{proposal_id}", response_model=ApiResponse, response_model_exclude_none=True)
async def delete_proposal(
    proposal_id: int,
    caller: Caller = Depends(require_roles(Role.SOCIETY)),
    db: AsyncSession = Depends(get_db),
):
    await proposal_store.delete_proposal(db, proposal_id, caller)
    return ApiResponse(message="Proposal deleted successfully")
