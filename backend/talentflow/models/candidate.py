from sqlalchemy import Column, String, DateTime

from talentflow.db.base import Base

STAGES = ("applied", "screen", "tech", "offer", "hired", "rejected")
DEFAULT_STAGE = "applied"


class Candidate(Base):
    """Candidate moving through the hiring pipeline for one job."""

    __tablename__ = "candidates"

    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, index=True)
    stage = Column(String, index=True, default=DEFAULT_STAGE)

    # Informational reference; no cascade and no foreign-key enforcement
    job_id = Column(String(36), index=True)

    created_at = Column(DateTime, index=True)
