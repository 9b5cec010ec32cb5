from sqlalchemy import Column, Integer, String, JSON, DateTime

from talentflow.db.base import Base


class Job(Base):
    """Job posting shown on the jobs board."""

    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True)
    title = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)  # stable once assigned
    status = Column(String, index=True, default="active")  # "active" | "archived"
    tags = Column(JSON, default=list)  # ordered, no duplicates

    # Manual sort position; gaps are allowed
    order = Column(Integer, index=True, default=0)

    created_at = Column(DateTime, index=True)
