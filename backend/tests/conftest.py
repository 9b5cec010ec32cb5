"""Shared fixtures for the store, the handlers and the simulated client stack."""

import random
from datetime import datetime

import pytest

from talentflow.client import SimulatedTransport, TalentFlowClient
from talentflow.db.store import open_store
from talentflow.main import create_app
from talentflow.services import SeedGenerator, TalentService, seed_store

SEED_NOW = datetime(2025, 3, 1, 12, 0, 0)


class ScriptedRandom(random.Random):
    """Random source whose ``random()`` draws come from a fixed script."""

    def __init__(self, draws, default=0.99):
        super().__init__(0)
        self.draws = list(draws)
        self.default = default

    def random(self):
        return self.draws.pop(0) if self.draws else self.default

    def uniform(self, a, b):
        return a


@pytest.fixture
def store():
    """Fresh in-memory store per test."""
    return open_store("sqlite://")


@pytest.fixture
def service(store):
    return TalentService(store)


@pytest.fixture
def generator():
    return SeedGenerator(random_seed=42, now=SEED_NOW)


@pytest.fixture
def seeded_store(store, generator):
    seed_store(store, job_count=25, candidate_count=120, generator=generator)
    return store


@pytest.fixture
def app(seeded_store):
    return create_app(store=seeded_store, seed=False)


@pytest.fixture
def make_client(app):
    """Build a client over the simulated transport with zero latency."""

    def _make(failure_rate=0.0, rng=None):
        transport = SimulatedTransport(
            app,
            latency_min_ms=0,
            latency_max_ms=0,
            failure_rate=failure_rate,
            rng=rng,
        )
        return TalentFlowClient(transport)

    return _make
