from sqlalchemy import Column, String, DateTime, Text

from talentflow.db.base import Base


class TimelineEntry(Base):
    """
    Append-only history of a candidate's stage changes.

    Powers the candidate detail timeline. Entries are never updated or deleted.
    """

    __tablename__ = "timeline_entries"

    id = Column(String(36), primary_key=True)
    candidate_id = Column(String(36), index=True)
    stage = Column(String)  # stage at the time of the entry
    timestamp = Column(DateTime, index=True)
    notes = Column(Text)
