"""
Pydantic schemas for the request surface.

Field names are snake_case in Python and camelCase on the wire
(``jobId``, ``createdAt``, ``pageSize``), matching the dashboard frontend.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from talentflow.core.utils import new_id
from talentflow.models import DEFAULT_STAGE

Stage = Literal["applied", "screen", "tech", "offer", "hired", "rejected"]
JobStatus = Literal["active", "archived"]
QuestionType = Literal[
    "single-choice",
    "multi-choice",
    "short-text",
    "long-text",
    "numeric",
    "file-upload",
]


class WireModel(BaseModel):
    """Base schema: camelCase aliases, accepts either name, reads ORM attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============== Jobs ==============


class JobCreate(WireModel):
    """Schema for job creation request."""

    title: str = Field(..., min_length=1)
    slug: Optional[str] = None
    status: Optional[JobStatus] = None
    tags: Optional[list[str]] = None
    order: Optional[int] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Job title is required")
        return value.strip()


class JobUpdate(WireModel):
    """Partial job update. The slug is not updatable."""

    title: Optional[str] = None
    status: Optional[JobStatus] = None
    tags: Optional[list[str]] = None
    order: Optional[int] = None


class JobOut(WireModel):
    id: str
    title: str
    slug: str
    status: JobStatus
    tags: list[str] = []
    order: int = 0
    created_at: Optional[datetime] = None


class JobPage(WireModel):
    data: list[JobOut]
    total: int
    page: int
    page_size: int


# ============== Candidates ==============


class CandidateUpdate(WireModel):
    """Partial candidate update. A present ``stage`` always appends a timeline entry."""

    name: Optional[str] = None
    email: Optional[str] = None
    stage: Optional[Stage] = None
    job_id: Optional[str] = None


class CandidateOut(WireModel):
    id: str
    name: str
    email: Optional[str] = None
    stage: Stage = DEFAULT_STAGE
    job_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("stage", mode="before")
    @classmethod
    def default_stage(cls, value):
        return value or DEFAULT_STAGE


class CandidatePage(WireModel):
    data: list[CandidateOut]
    total: int
    page: int
    page_size: int


class TimelineEntryOut(WireModel):
    id: str
    candidate_id: str
    stage: str
    timestamp: datetime
    notes: Optional[str] = None


# ============== Assessments ==============


class QuestionValidation(WireModel):
    """maxLength applies to text questions, min/max to numeric ones."""

    max_length: Optional[int] = None
    min: Optional[float] = None
    max: Optional[float] = None


class Question(WireModel):
    id: str = Field(default_factory=new_id)
    type: QuestionType = "short-text"
    question: str = ""
    required: bool = False
    options: list[str] = []  # choice types only
    validation: Optional[QuestionValidation] = None


class Section(WireModel):
    id: str = Field(default_factory=new_id)
    title: str = ""
    questions: list[Question] = []


class AssessmentIn(WireModel):
    """
    Body of an assessment upsert.

    ``id``, ``jobId`` and ``createdAt`` sent by the client are ignored; the
    server owns them.
    """

    title: Optional[str] = None
    sections: Optional[list[Section]] = None


class AssessmentOut(WireModel):
    id: str
    job_id: str
    title: Optional[str] = None
    sections: list[Section] = []
    created_at: Optional[datetime] = None
