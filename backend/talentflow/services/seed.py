"""
Seed Generator.

Populates an empty store with demo jobs, candidates, assessments and timeline
entries. Content is random; pass ``random_seed`` for a reproducible dataset
(identifiers included).
"""

import random
import uuid
from datetime import datetime, timedelta
from typing import Any, Optional

from talentflow.core.config import settings
from talentflow.core.errors import SeedError
from talentflow.core.logging import get_logger
from talentflow.core.utils import slugify, utcnow
from talentflow.db.store import EntityKind, EntityStore
from talentflow.models import STAGES

logger = get_logger(__name__)

JOB_TITLES = [
    "Frontend Developer", "Backend Developer", "Full Stack Developer", "DevOps Engineer",
    "Product Manager", "UX Designer", "Data Scientist", "Mobile Developer",
    "QA Engineer", "Technical Writer", "Sales Manager", "Marketing Specialist",
    "Customer Success Manager", "Business Analyst", "System Administrator",
    "Security Engineer", "Cloud Architect", "Machine Learning Engineer",
    "Project Manager", "Scrum Master", "UI Designer", "Database Administrator",
    "Site Reliability Engineer", "Solutions Architect", "Technical Lead",
]

TAGS = [
    "Remote", "Full-time", "Part-time", "Contract", "Senior",
    "Junior", "Mid-level", "Urgent", "New",
]

FIRST_NAMES = [
    "John", "Jane", "Michael", "Sarah", "David",
    "Emily", "Chris", "Jessica", "Daniel", "Ashley",
]
LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones",
    "Garcia", "Miller", "Davis", "Rodriguez", "Martinez",
]

ACTIVE_RATIO = 0.7
JOB_AGE_DAYS = 30
CANDIDATE_AGE_DAYS = 20
ASSESSED_JOBS = 3


class SeedGenerator:
    """Builds seed records as plain dicts keyed by model attribute names."""

    def __init__(self, random_seed: Optional[int] = None, now: Optional[datetime] = None):
        self.rng = random.Random(random_seed)
        self.now = now or utcnow()

    def _id(self) -> str:
        return str(uuid.UUID(int=self.rng.getrandbits(128), version=4))

    def _backdate(self, max_days: int) -> datetime:
        return self.now - timedelta(seconds=self.rng.random() * max_days * 86400)

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------
    def generate_jobs(self, count: int = 25) -> list[dict[str, Any]]:
        jobs = []
        for i in range(count):
            title = self.rng.choice(JOB_TITLES)
            jobs.append({
                "id": self._id(),
                "title": title,
                # The index keeps slugs unique when titles repeat
                "slug": f"{slugify(title)}-{i}",
                "status": "active" if self.rng.random() < ACTIVE_RATIO else "archived",
                "tags": self.rng.sample(TAGS, self.rng.randint(1, 4)),
                "order": i,
                "created_at": self._backdate(JOB_AGE_DAYS),
            })
        return jobs

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------
    def generate_candidates(self, jobs: list[dict], count: int = 1000) -> list[dict[str, Any]]:
        if not jobs:
            return []

        candidates = []
        for _ in range(count):
            first = self.rng.choice(FIRST_NAMES)
            last = self.rng.choice(LAST_NAMES)
            candidates.append({
                "id": self._id(),
                "name": f"{first} {last}",
                "email": f"{first.lower()}.{last.lower()}@email.com",
                "stage": self.rng.choice(STAGES),
                "job_id": self.rng.choice(jobs)["id"],
                "created_at": self._backdate(CANDIDATE_AGE_DAYS),
            })
        return candidates

    # ------------------------------------------------------------------
    # Assessments
    # ------------------------------------------------------------------
    def _question(self, qtype: str, text: str, required: bool, **extra) -> dict[str, Any]:
        question = {
            "id": self._id(),
            "type": qtype,
            "question": text,
            "required": required,
            "options": extra.pop("options", []),
        }
        if extra.get("validation"):
            question["validation"] = extra["validation"]
        return question

    def _sections(self) -> list[dict[str, Any]]:
        """The fixed two-section questionnaire; covers every question type."""
        q = self._question
        return [
            {
                "id": self._id(),
                "title": "Technical Skills",
                "questions": [
                    q("single-choice", "What is your experience level with React?", True,
                      options=["Beginner", "Intermediate", "Advanced", "Expert"]),
                    q("multi-choice", "Which technologies have you worked with?", True,
                      options=["JavaScript", "TypeScript", "Node.js", "Python", "Java", "C#"]),
                    q("short-text", "Years of experience in software development?", True,
                      validation={"maxLength": 50}),
                    q("long-text", "Describe your most challenging project.", False,
                      validation={"maxLength": 1000}),
                    q("numeric", "Rate your JavaScript skills (1-10)", True,
                      validation={"min": 1, "max": 10}),
                ],
            },
            {
                "id": self._id(),
                "title": "General Questions",
                "questions": [
                    q("single-choice", "Are you available for remote work?", True,
                      options=["Yes", "No", "Hybrid preferred"]),
                    q("short-text", "Expected salary range?", False,
                      validation={"maxLength": 100}),
                    q("file-upload", "Upload your portfolio or resume", False),
                ],
            },
        ]

    def generate_assessments(self, jobs: list[dict]) -> list[dict[str, Any]]:
        return [
            {
                "id": self._id(),
                "job_id": job["id"],
                "title": f"{job['title']} Assessment",
                "sections": self._sections(),
                "created_at": self.now,
            }
            for job in jobs[:ASSESSED_JOBS]
        ]

    # ------------------------------------------------------------------
    # Timeline
    # ------------------------------------------------------------------
    def generate_timeline(self, candidates: list[dict]) -> list[dict[str, Any]]:
        """
        One to three entries per candidate, one day apart starting at the
        candidate's ``created_at``.

        The first is the application itself and the last always matches the
        candidate's current stage; stages in between are arbitrary.
        """
        timeline = []
        for candidate in candidates:
            entry_count = self.rng.randint(1, 3)
            for i in range(entry_count):
                is_last = i == entry_count - 1
                stage = candidate["stage"] if is_last else self.rng.choice(STAGES)
                timeline.append({
                    "id": self._id(),
                    "candidate_id": candidate["id"],
                    "stage": stage,
                    "timestamp": candidate["created_at"] + timedelta(days=i),
                    "notes": "Application submitted" if i == 0 else f"Moved to {stage} stage",
                })
        return timeline


def seed_store(
    store: EntityStore,
    job_count: Optional[int] = None,
    candidate_count: Optional[int] = None,
    generator: Optional[SeedGenerator] = None,
) -> bool:
    """
    Seed the store once.

    Returns False without touching anything when jobs already exist. The four
    bulk inserts share one transaction, so a failure leaves the store empty and
    raises SeedError.
    """
    if store.count(EntityKind.JOB) > 0:
        logger.info("Database already seeded. Skipping...")
        return False

    generator = generator or SeedGenerator(settings.SEED_RANDOM_SEED)
    job_count = settings.SEED_JOB_COUNT if job_count is None else job_count
    candidate_count = settings.SEED_CANDIDATE_COUNT if candidate_count is None else candidate_count

    logger.info("Seeding database...")
    jobs = generator.generate_jobs(job_count)
    candidates = generator.generate_candidates(jobs, candidate_count)
    assessments = generator.generate_assessments(jobs)
    timeline = generator.generate_timeline(candidates)

    try:
        with store.transaction():
            store.bulk_add(EntityKind.JOB, jobs)
            store.bulk_add(EntityKind.CANDIDATE, candidates)
            store.bulk_add(EntityKind.ASSESSMENT, assessments)
            store.bulk_add(EntityKind.TIMELINE, timeline)
    except Exception as exc:
        logger.error("Error seeding database: %s", exc)
        raise SeedError(f"Seeding failed: {exc}") from exc

    logger.info(
        "Database seeded: %d jobs, %d candidates, %d assessments, %d timeline entries",
        len(jobs), len(candidates), len(assessments), len(timeline),
    )
    return True
