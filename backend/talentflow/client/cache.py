"""
Client-side query cache.

Views are cached under parameter tuples such as
``("candidates", search, stage, page)``. Each entry remembers how to refetch
itself and a request generation: when a newer fetch starts, or the entry is
patched locally, completions from older requests are dropped.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx

from talentflow.core.errors import TalentFlowError
from talentflow.core.logging import get_logger

logger = get_logger(__name__)

Key = tuple
Fetcher = Callable[[], Awaitable[Any]]


@dataclass
class CacheEntry:
    data: Any = None
    fetcher: Optional[Fetcher] = None
    stale: bool = False
    generation: int = 0
    error: Optional[BaseException] = None  # last failed refetch, retryable


def _matches(key: Key, prefix: Key) -> bool:
    return key[:len(prefix)] == prefix


class QueryCache:
    def __init__(self):
        self._entries: dict[Key, CacheEntry] = {}

    def get(self, key: Key) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry else None

    def entry(self, key: Key) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def set(self, key: Key, data: Any, fetcher: Optional[Fetcher] = None) -> None:
        entry = self._entries.setdefault(key, CacheEntry())
        entry.data = data
        entry.stale = False
        entry.error = None
        if fetcher is not None:
            entry.fetcher = fetcher

    def keys(self, prefix: Key = ()) -> list[Key]:
        return [key for key in self._entries if _matches(key, prefix)]

    async def fetch(self, key: Key, fetcher: Fetcher) -> bool:
        """
        Run ``fetcher`` and store its result under ``key``.

        Returns False when the result was discarded because a newer request or
        a local patch touched the entry while this one was in flight.
        """
        entry = self._entries.setdefault(key, CacheEntry())
        entry.fetcher = fetcher
        entry.generation += 1
        generation = entry.generation

        try:
            data = await fetcher()
        except (httpx.HTTPError, TalentFlowError) as exc:
            if entry.generation == generation:
                entry.error = exc
                entry.stale = True
            raise

        if self._entries.get(key) is not entry or entry.generation != generation:
            logger.debug("discarding stale response for %s", key)
            return False

        entry.data = data
        entry.stale = False
        entry.error = None
        return True

    def update_matching(self, prefix: Key, fn: Callable[[Any], Any]) -> int:
        """
        Patch every cached view under ``prefix`` in place.

        In-flight fetches for those views are superseded, so a response computed
        before the patch cannot overwrite it.
        """
        count = 0
        for key in self.keys(prefix):
            entry = self._entries[key]
            if entry.data is None:
                continue
            entry.data = fn(entry.data)
            entry.generation += 1
            count += 1
        return count

    def invalidate(self, prefix: Key = ()) -> list[Key]:
        keys = self.keys(prefix)
        for key in keys:
            self._entries[key].stale = True
        return keys

    async def refetch_stale(self, prefix: Key = ()) -> int:
        """
        Refetch every stale view under ``prefix`` concurrently.

        A view whose refetch fails stays stale with its error recorded; the
        number of views refreshed is returned.
        """
        targets = [
            (key, entry)
            for key, entry in self._entries.items()
            if _matches(key, prefix) and entry.stale and entry.fetcher is not None
        ]
        if not targets:
            return 0

        results = await asyncio.gather(
            *(self.fetch(key, entry.fetcher) for key, entry in targets),
            return_exceptions=True,
        )

        refreshed = 0
        for (key, _), result in zip(targets, results):
            if isinstance(result, BaseException) and not isinstance(
                result, (httpx.HTTPError, TalentFlowError)
            ):
                raise result
            if isinstance(result, (httpx.HTTPError, TalentFlowError)):
                logger.error("refetch of %s failed: %s", key, result)
            elif result:
                refreshed += 1
        return refreshed
