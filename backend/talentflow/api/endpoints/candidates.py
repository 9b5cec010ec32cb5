"""
Candidates API endpoints.

Listing for the kanban board, partial updates (stage moves) and the per
candidate timeline.
"""

from fastapi import APIRouter, Depends, Query

from talentflow.schemas import CandidateOut, CandidatePage, CandidateUpdate, TimelineEntryOut
from talentflow.services import TalentService
from talentflow.services.talent import DEFAULT_CANDIDATE_PAGE_SIZE
from talentflow.api.deps import get_service

router = APIRouter()


@router.get("", response_model=CandidatePage)
async def list_candidates(
    search: str = "",
    stage: str = "",
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_CANDIDATE_PAGE_SIZE, ge=1, alias="pageSize"),
    service: TalentService = Depends(get_service),
):
    """List candidates, newest first. Search matches name or email."""
    result = await service.list_candidates(
        search=search, stage=stage, page=page, page_size=page_size
    )
    return CandidatePage.model_validate(result)


@router.patch("/{candidate_id}", response_model=CandidateOut)
async def update_candidate(
    candidate_id: str,
    payload: CandidateUpdate,
    service: TalentService = Depends(get_service),
):
    """
    Partially update a candidate.

    A "stage" in the body appends a timeline entry ("Moved to {stage} stage").
    """
    candidate = await service.update_candidate(candidate_id, payload)
    return CandidateOut.model_validate(candidate)


@router.get("/{candidate_id}/timeline", response_model=list[TimelineEntryOut])
async def get_candidate_timeline(
    candidate_id: str,
    service: TalentService = Depends(get_service),
):
    entries = await service.get_timeline(candidate_id)
    return [TimelineEntryOut.model_validate(entry) for entry in entries]
