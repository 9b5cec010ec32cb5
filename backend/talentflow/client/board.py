"""
Candidate kanban board with optimistic stage moves.

A drag to another column rewrites the candidate's stage in every cached
candidates view immediately, then sends the PATCH. Success writes the saved
stage into the views; failure throws them away. Either way the views are then
refetched, with moves still in flight reapplied on top, so the board converges
to whatever the store holds without any manual undo.

    Idle -> Pending -> Committed
                    -> RolledBack

Dropping a card back onto its own column never leaves Idle and sends nothing.
"""

import asyncio
import copy
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any, Optional, Protocol

import httpx

from talentflow.client.api import TalentFlowClient
from talentflow.client.cache import QueryCache
from talentflow.core.errors import TalentFlowError
from talentflow.core.logging import get_logger
from talentflow.models import DEFAULT_STAGE, STAGES

logger = get_logger(__name__)

CANDIDATES_VIEW = "candidates"
TIMELINE_VIEW = "candidate-timeline"

BOARD_PAGE_SIZE = 1000


class TransitionState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class StageTransition:
    """One drag-and-drop stage change for one candidate."""

    candidate_id: str
    source: Optional[str]
    destination: Optional[str]
    state: TransitionState = TransitionState.IDLE
    error: Optional[BaseException] = None
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def settled(self) -> bool:
        return self.state is not TransitionState.PENDING

    async def wait(self) -> "StageTransition":
        """Resolve once the server outcome has been reconciled."""
        if self.task is not None:
            await self.task
        return self


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Default notification surface: toasts go to the log."""

    def success(self, message: str) -> None:
        logger.info("✅ %s", message)

    def error(self, message: str) -> None:
        logger.warning("❌ %s", message)


def _with_stage(view: dict[str, Any], candidate_id: str, stage: str) -> dict[str, Any]:
    patched = copy.deepcopy(view)
    for candidate in patched.get("data") or []:
        if candidate.get("id") == candidate_id:
            candidate["stage"] = stage
    return patched


class CandidateBoard:
    """Candidates grouped into one column per stage."""

    def __init__(
        self,
        client: TalentFlowClient,
        cache: Optional[QueryCache] = None,
        notifier: Optional[Notifier] = None,
        page_size: int = BOARD_PAGE_SIZE,
    ):
        self.client = client
        self.cache = cache or QueryCache()
        self.notifier = notifier or LoggingNotifier()
        self.page_size = page_size

        self.search = ""
        self.stage_filter = ""
        self.page = 1
        self._inflight: set[asyncio.Task] = set()
        # Latest unsettled move per candidate
        self._pending: dict[str, StageTransition] = {}

    @property
    def current_key(self) -> tuple:
        return (CANDIDATES_VIEW, self.search, self.stage_filter, self.page)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    async def load(self, search: str = "", stage: str = "", page: int = 1) -> bool:
        """
        Fetch the board for the given filters.

        Returns False if the filters changed while the request was in flight;
        the response is then not shown.
        """
        self.search, self.stage_filter, self.page = search, stage, page
        key = self.current_key
        fetcher = partial(
            self.client.list_candidates,
            search=search,
            stage=stage,
            page=page,
            page_size=self.page_size,
        )
        applied = await self.cache.fetch(key, fetcher)
        if key != self.current_key:
            logger.debug("board filters changed, ignoring response for %s", key)
            return False
        return applied

    async def load_timeline(self, candidate_id: str) -> list[dict[str, Any]]:
        key = (TIMELINE_VIEW, candidate_id)
        await self.cache.fetch(key, partial(self.client.get_timeline, candidate_id))
        return self.timeline(candidate_id)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def candidates(self) -> list[dict[str, Any]]:
        view = self.cache.get(self.current_key)
        return list(view.get("data") or []) if view else []

    def columns(self) -> dict[str, list[str]]:
        columns: dict[str, list[str]] = {stage: [] for stage in STAGES}
        for candidate in self.candidates():
            stage = candidate.get("stage") or DEFAULT_STAGE
            columns.setdefault(stage, []).append(candidate["id"])
        return columns

    def stage_of(self, candidate_id: str) -> Optional[str]:
        for stage, ids in self.columns().items():
            if candidate_id in ids:
                return stage
        return None

    def timeline(self, candidate_id: str) -> list[dict[str, Any]]:
        return list(self.cache.get((TIMELINE_VIEW, candidate_id)) or [])

    # ------------------------------------------------------------------
    # Stage moves
    # ------------------------------------------------------------------
    def drag_end(self, candidate_id: str, destination: Optional[str]) -> StageTransition:
        """
        Handle a card dropped on ``destination``.

        The optimistic change is visible as soon as this returns; reconciliation
        continues in a background task (see ``StageTransition.wait``).
        """
        source = self.stage_of(candidate_id)
        transition = StageTransition(candidate_id, source, destination)

        if source is None or destination not in STAGES or source == destination:
            return transition

        transition.state = TransitionState.PENDING
        self.cache.update_matching(
            (CANDIDATES_VIEW,), partial(_with_stage, candidate_id=candidate_id, stage=destination)
        )
        logger.info("moving candidate %s: %s -> %s (pending)", candidate_id, source, destination)

        task = asyncio.create_task(self._reconcile(transition))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        transition.task = task
        self._pending[candidate_id] = transition
        return transition

    async def move_candidate(self, candidate_id: str, destination: str) -> StageTransition:
        return await self.drag_end(candidate_id, destination).wait()

    async def _reconcile(self, transition: StageTransition) -> None:
        candidate_id = transition.candidate_id

        try:
            saved = await self.client.update_candidate(candidate_id, {"stage": transition.destination})
        except (httpx.HTTPError, TalentFlowError) as exc:
            self._settle(transition)
            transition.error = exc
            logger.info("move of candidate %s failed (%s), rolling back", candidate_id, exc)
            self.notifier.error("Failed to move candidate. Reverting.")

            await self._resync(candidate_id)
            transition.state = TransitionState.ROLLED_BACK
            return

        self._settle(transition)
        transition.state = TransitionState.COMMITTED
        logger.info("moved candidate %s to %s", candidate_id, saved["stage"])
        self.notifier.success("Candidate moved")

        # A rollback of another move may have refetched the views before this
        # PATCH landed
        self.cache.update_matching(
            (CANDIDATES_VIEW,),
            partial(_with_stage, candidate_id=candidate_id, stage=saved["stage"]),
        )
        await self._resync(candidate_id)

    def _settle(self, transition: StageTransition) -> None:
        if self._pending.get(transition.candidate_id) is transition:
            del self._pending[transition.candidate_id]

    async def _resync(self, candidate_id: str) -> None:
        """Refetch candidate views and the timeline, keeping unsettled moves visible."""
        timeline_key = (TIMELINE_VIEW, candidate_id)
        self.cache.invalidate((CANDIDATES_VIEW,))
        self.cache.invalidate(timeline_key)
        await self.cache.refetch_stale((CANDIDATES_VIEW,))
        await self.cache.refetch_stale(timeline_key)
        self._reapply_pending()

    def _reapply_pending(self) -> None:
        for candidate_id, pending in self._pending.items():
            self.cache.update_matching(
                (CANDIDATES_VIEW,),
                partial(_with_stage, candidate_id=candidate_id, stage=pending.destination),
            )
