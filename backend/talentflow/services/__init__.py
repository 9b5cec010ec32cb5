from talentflow.services.talent import TalentService, Page
from talentflow.services.seed import SeedGenerator, seed_store

__all__ = [
    "TalentService",
    "Page",
    "SeedGenerator",
    "seed_store",
]
