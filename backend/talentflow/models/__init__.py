from talentflow.models.job import Job
from talentflow.models.candidate import Candidate, STAGES, DEFAULT_STAGE
from talentflow.models.assessment import Assessment, QUESTION_TYPES
from talentflow.models.timeline import TimelineEntry

__all__ = [
    "Job",
    "Candidate",
    "Assessment",
    "TimelineEntry",
    "STAGES",
    "DEFAULT_STAGE",
    "QUESTION_TYPES",
]
