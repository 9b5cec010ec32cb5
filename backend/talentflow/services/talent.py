"""
Request handlers.

TalentService implements every logical request against an injected
EntityStore. Methods are coroutines so they can sit behind the simulated
transport, but none of them awaits between reading and writing the store:
each handler runs to completion atomically with respect to other requests on
the same event loop.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional, Sequence

from sqlalchemy import func, or_, select

from talentflow.core.errors import InvalidQuery
from talentflow.core.logging import get_logger
from talentflow.core.utils import new_id, slugify, unique_ordered, utcnow
from talentflow.db.store import EntityKind, EntityStore
from talentflow.models import Assessment, Candidate, Job, TimelineEntry
from talentflow.schemas import AssessmentIn, CandidateUpdate, JobCreate, JobUpdate

logger = get_logger(__name__)

JOB_SORT_FIELDS = {
    "order": Job.order,
    "title": Job.title,
    "status": Job.status,
    "createdAt": Job.created_at,
    "slug": Job.slug,
}

DEFAULT_JOB_PAGE_SIZE = 10
DEFAULT_CANDIDATE_PAGE_SIZE = 50
DEFAULT_ASSESSMENT_TITLE = "New Assessment"


@dataclass
class Page:
    """One page of a filtered, sorted listing plus the pre-pagination total."""

    data: Sequence[Any]
    total: int
    page: int
    page_size: int


def _check_paging(page: int, page_size: int) -> int:
    if page < 1 or page_size < 1:
        raise InvalidQuery("page and pageSize must be positive")
    return (page - 1) * page_size


def stage_note(stage: str) -> str:
    return f"Moved to {stage} stage"


class TalentService:
    """Jobs, candidates, timelines and assessments over one EntityStore."""

    def __init__(self, store: EntityStore):
        self.store = store

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------
    async def list_jobs(
        self,
        search: str = "",
        status: str = "",
        page: int = 1,
        page_size: int = DEFAULT_JOB_PAGE_SIZE,
        sort: str = "order",
    ) -> Page:
        """
        List jobs.

        - status: exact match
        - search: case-insensitive substring of the title or of any tag
        - sort: a field name, ``-`` prefix for descending; ties break by id
        """
        start = _check_paging(page, page_size)

        sort = sort or "order"
        descending = sort.startswith("-")
        field = sort.lstrip("-")
        column = JOB_SORT_FIELDS.get(field)
        if column is None:
            raise InvalidQuery(
                f"Invalid sort field '{field}'. Must be one of: {sorted(JOB_SORT_FIELDS)}"
            )

        stmt = select(Job)
        if status:
            stmt = stmt.where(Job.status == status)
        stmt = stmt.order_by(column.desc() if descending else column.asc(), Job.id)
        jobs = list(self.store.scalars(stmt))

        # Tags are JSON, so the text search runs in Python
        if search:
            needle = search.lower()
            jobs = [
                job
                for job in jobs
                if needle in (job.title or "").lower()
                or any(needle in tag.lower() for tag in (job.tags or []))
            ]

        return Page(
            data=jobs[start:start + page_size],
            total=len(jobs),
            page=page,
            page_size=page_size,
        )

    def _unique_slug(self, base: str) -> str:
        slug = base
        suffix = 2
        while self.store.find_first(EntityKind.JOB, slug=slug) is not None:
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    async def create_job(self, payload: JobCreate) -> Job:
        base = slugify(payload.slug) if payload.slug else slugify(payload.title)
        job = self.store.add(
            EntityKind.JOB,
            {
                "id": new_id(),
                "title": payload.title,
                "slug": self._unique_slug(base),
                "status": payload.status or "active",
                "tags": unique_ordered(payload.tags or []),
                "order": payload.order if payload.order is not None else 0,
                "created_at": utcnow(),
            },
        )
        logger.info("created job %s (%s)", job.id, job.slug)
        return job

    async def update_job(self, job_id: str, payload: JobUpdate) -> Job:
        fields = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "tags" in fields:
            fields["tags"] = unique_ordered(fields["tags"])
        return self.store.update(EntityKind.JOB, job_id, fields)

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------
    async def list_candidates(
        self,
        search: str = "",
        stage: str = "",
        page: int = 1,
        page_size: int = DEFAULT_CANDIDATE_PAGE_SIZE,
    ) -> Page:
        """List candidates, newest first; search matches name or email."""
        start = _check_paging(page, page_size)

        stmt = select(Candidate)
        if stage:
            stmt = stmt.where(Candidate.stage == stage)
        if search:
            needle = search.lower()
            stmt = stmt.where(
                or_(
                    func.lower(Candidate.name).contains(needle, autoescape=True),
                    func.lower(Candidate.email).contains(needle, autoescape=True),
                )
            )

        total = self.store.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        rows = self.store.scalars(
            stmt.order_by(Candidate.created_at.desc(), Candidate.id)
            .offset(start)
            .limit(page_size)
        )
        return Page(data=list(rows), total=total, page=page, page_size=page_size)

    async def update_candidate(self, candidate_id: str, payload: CandidateUpdate) -> Candidate:
        """
        Merge the update into the candidate.

        Any ``stage`` in the payload appends exactly one timeline entry, even
        when the stage is unchanged.
        """
        fields = payload.model_dump(exclude_unset=True, exclude_none=True)
        with self.store.transaction():
            candidate = self.store.update(EntityKind.CANDIDATE, candidate_id, fields)
            if "stage" in fields:
                self._append_timeline(candidate_id, fields["stage"])
        return candidate

    def _append_timeline(self, candidate_id: str, stage: str) -> TimelineEntry:
        latest = self.store.scalar(
            select(func.max(TimelineEntry.timestamp)).where(
                TimelineEntry.candidate_id == candidate_id
            )
        )
        timestamp = utcnow()
        # Strictly after the latest entry so the newest one always sorts last
        if latest is not None and latest >= timestamp:
            timestamp = latest + timedelta(microseconds=1)

        return self.store.add(
            EntityKind.TIMELINE,
            {
                "id": new_id(),
                "candidate_id": candidate_id,
                "stage": stage,
                "timestamp": timestamp,
                "notes": stage_note(stage),
            },
        )

    async def get_timeline(self, candidate_id: str) -> list[TimelineEntry]:
        """Timeline entries for a candidate, oldest first."""
        return list(
            self.store.find_all(
                EntityKind.TIMELINE,
                order_by=[TimelineEntry.timestamp],
                candidate_id=candidate_id,
            )
        )

    # ------------------------------------------------------------------
    # Assessments
    # ------------------------------------------------------------------
    async def get_assessment(self, job_id: str) -> Optional[Assessment]:
        return self.store.find_first(EntityKind.ASSESSMENT, job_id=job_id)

    async def upsert_assessment(self, job_id: str, payload: AssessmentIn) -> Assessment:
        """Update the job's assessment in place, or create it if it has none."""
        fields: dict[str, Any] = {}
        if payload.title is not None:
            fields["title"] = payload.title
        if payload.sections is not None:
            fields["sections"] = [
                section.model_dump(by_alias=True, exclude_none=True)
                for section in payload.sections
            ]

        with self.store.transaction():
            existing = self.store.find_first(EntityKind.ASSESSMENT, job_id=job_id)
            if existing is not None:
                return self.store.update(EntityKind.ASSESSMENT, existing.id, fields)

            assessment = self.store.add(
                EntityKind.ASSESSMENT,
                {
                    "id": new_id(),
                    "job_id": job_id,
                    "title": fields.get("title", DEFAULT_ASSESSMENT_TITLE),
                    "sections": fields.get("sections", []),
                    "created_at": utcnow(),
                },
            )
        logger.info("created assessment %s for job %s", assessment.id, job_id)
        return assessment
