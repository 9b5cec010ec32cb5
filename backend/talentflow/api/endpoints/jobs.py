"""
Jobs API endpoints.

Listing with search/status filters, sorting and pagination, plus create and
partial update (used for edits and the archive toggle).
"""

from fastapi import APIRouter, Depends, Query

from talentflow.schemas import JobCreate, JobOut, JobPage, JobUpdate
from talentflow.services import TalentService
from talentflow.services.talent import DEFAULT_JOB_PAGE_SIZE
from talentflow.api.deps import get_service

router = APIRouter()


@router.get("", response_model=JobPage)
async def list_jobs(
    search: str = "",
    status: str = "",
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_JOB_PAGE_SIZE, ge=1, alias="pageSize"),
    sort: str = "order",
    service: TalentService = Depends(get_service),
):
    """
    List jobs.

    - search: matches the title or any tag, case-insensitive
    - status: "active" or "archived"
    - sort: field name (order, title, status, createdAt, slug); prefix "-" for descending
    """
    result = await service.list_jobs(
        search=search, status=status, page=page, page_size=page_size, sort=sort
    )
    return JobPage.model_validate(result)


@router.post("", response_model=JobOut)
async def create_job(
    payload: JobCreate,
    service: TalentService = Depends(get_service),
):
    """Create a job. Status defaults to active, tags to [], order to 0."""
    job = await service.create_job(payload)
    return JobOut.model_validate(job)


@router.patch("/{job_id}", response_model=JobOut)
async def update_job(
    job_id: str,
    payload: JobUpdate,
    service: TalentService = Depends(get_service),
):
    job = await service.update_job(job_id, payload)
    return JobOut.model_validate(job)
