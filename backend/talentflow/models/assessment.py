from sqlalchemy import Column, String, JSON, DateTime

from talentflow.db.base import Base

QUESTION_TYPES = (
    "single-choice",
    "multi-choice",
    "short-text",
    "long-text",
    "numeric",
    "file-upload",
)


class Assessment(Base):
    """
    Questionnaire attached to a job.

    At most one assessment exists per job; the upsert handler maintains this,
    the table does not.
    """

    __tablename__ = "assessments"

    id = Column(String(36), primary_key=True)
    job_id = Column(String(36), index=True)
    title = Column(String)

    # Ordered sections, each with ordered questions, in wire (camelCase) shape.
    # Format: [{"id", "title", "questions": [{"id", "type", "question",
    #           "required", "options", "validation"}]}]
    sections = Column(JSON, default=list)

    created_at = Column(DateTime, index=True)
