"""
Simulated Transport.

An httpx transport that behaves like a slow, unreliable link in front of the
in-process API: every request waits a random latency, and mutating requests
fail outright with a fixed probability before reaching any handler.
"""

import asyncio
import random
import time
from typing import Awaitable, Callable, Optional

import httpx
from fastapi import FastAPI

from talentflow.core.config import settings
from talentflow.core.errors import TransientNetworkFailure
from talentflow.core.logging import get_logger

logger = get_logger(__name__)

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class SimulatedTransport(httpx.AsyncBaseTransport):
    """
    Latency and failure injection around ``httpx.ASGITransport``.

    Each mutating call draws its own uniform value; nothing is carried between
    calls, so failures are independent and there is no backoff state.
    """

    def __init__(
        self,
        app: FastAPI,
        latency_min_ms: Optional[int] = None,
        latency_max_ms: Optional[int] = None,
        failure_rate: Optional[float] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.latency_min_ms = settings.LATENCY_MIN_MS if latency_min_ms is None else latency_min_ms
        self.latency_max_ms = settings.LATENCY_MAX_MS if latency_max_ms is None else latency_max_ms
        self.failure_rate = settings.FAILURE_RATE if failure_rate is None else failure_rate
        if self.latency_min_ms > self.latency_max_ms:
            raise ValueError("latency_min_ms must not exceed latency_max_ms")

        self.rng = rng or random.Random()
        self._sleep = sleep
        self._inner = httpx.ASGITransport(app=app)

    def sample_latency(self) -> float:
        """Latency in seconds, uniform over the configured bounds."""
        return self.rng.uniform(self.latency_min_ms, self.latency_max_ms) / 1000.0

    def should_fail(self, method: str) -> bool:
        if method.upper() not in MUTATING_METHODS:
            return False
        return self.rng.random() < self.failure_rate

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        started = time.perf_counter()
        await self._sleep(self.sample_latency())

        if self.should_fail(request.method):
            logger.warning("simulated network error on %s %s", request.method, request.url.path)
            raise TransientNetworkFailure("Simulated network error", request=request)

        response = await self._inner.handle_async_request(request)
        logger.debug(
            "%s %s -> %d in %.0fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    async def aclose(self) -> None:
        await self._inner.aclose()
