"""
Assessments API endpoints.

One assessment per job, addressed by the job id.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from talentflow.schemas import AssessmentIn, AssessmentOut
from talentflow.services import TalentService
from talentflow.api.deps import get_service

router = APIRouter()


@router.get("/{job_id}", response_model=Optional[AssessmentOut])
async def get_assessment(
    job_id: str,
    service: TalentService = Depends(get_service),
):
    """Return the job's assessment, or null if it has none yet."""
    assessment = await service.get_assessment(job_id)
    if assessment is None:
        return None
    return AssessmentOut.model_validate(assessment)


@router.put("/{job_id}", response_model=AssessmentOut)
async def upsert_assessment(
    job_id: str,
    payload: AssessmentIn,
    service: TalentService = Depends(get_service),
):
    """Create the job's assessment, or update the existing one in place."""
    assessment = await service.upsert_assessment(job_id, payload)
    return AssessmentOut.model_validate(assessment)
