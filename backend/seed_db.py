"""
TalentFlow Database Seeder

Populates an empty database with demo data:
- 25 jobs (about 70% active) with tags and manual order
- 1000 candidates spread over the jobs and the six pipeline stages
- Assessments for the first three jobs covering every question type
- 1-3 timeline entries per candidate, ending at the current stage

Running it again on a seeded database does nothing.
"""

import argparse

from talentflow.core.config import settings
from talentflow.db.store import EntityKind, open_store
from talentflow.services import SeedGenerator, seed_store


def seed_database(
    database_url: str | None = None,
    jobs: int | None = None,
    candidates: int | None = None,
    random_seed: int | None = None,
) -> bool:
    """Seed the database with demo data."""
    store = open_store(database_url)

    random_seed = settings.SEED_RANDOM_SEED if random_seed is None else random_seed
    seeded = seed_store(
        store,
        job_count=jobs,
        candidate_count=candidates,
        generator=SeedGenerator(random_seed),
    )

    if not seeded:
        print("Database already seeded. Skipping...")
        return False

    print("✅ Database seeded successfully!")
    print("\n📋 Created:")
    print(f"   - Jobs: {store.count(EntityKind.JOB)}")
    print(f"   - Candidates: {store.count(EntityKind.CANDIDATE)}")
    print(f"   - Assessments: {store.count(EntityKind.ASSESSMENT)}")
    print(f"   - Timeline entries: {store.count(EntityKind.TIMELINE)}")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the TalentFlow database once.")
    parser.add_argument("--database-url", default=None)
    parser.add_argument("--jobs", type=int, default=None)
    parser.add_argument("--candidates", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None, help="random seed for reproducible data")
    args = parser.parse_args()

    seed_database(args.database_url, args.jobs, args.candidates, args.seed)
