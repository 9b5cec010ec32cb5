"""
Tests for the query cache and the optimistic candidate board.

Tests:
- drag shows the new stage immediately, before the server answers
- success commits, notifies and refreshes the timeline
- failure notifies, refetches and converges to the store
- no-op drags never leave Idle
- stale responses never overwrite newer state
"""

import asyncio

import httpx
import pytest

from talentflow.client import CandidateBoard, QueryCache
from talentflow.client.board import CANDIDATES_VIEW, TransitionState
from talentflow.db.store import EntityKind


class RecordingNotifier:
    def __init__(self):
        self.successes = []
        self.errors = []

    def success(self, message):
        self.successes.append(message)

    def error(self, message):
        self.errors.append(message)


class GatedCandidates:
    """Stand-in client whose listings block until released, one gate per search."""

    def __init__(self):
        self.gates = {}

    def release(self, search):
        self.gates.setdefault(search, asyncio.Event()).set()

    async def list_candidates(self, search="", stage="", page=1, page_size=50):
        await self.gates.setdefault(search, asyncio.Event()).wait()
        return {
            "data": [{"id": f"cand-{search}", "stage": "applied"}],
            "total": 1,
            "page": page,
            "pageSize": page_size,
        }


class HeldMoves:
    """Client wrapper: PATCHes for ``held`` wait on a gate, those for ``failing`` go over a dead link."""

    def __init__(self, client, failing_client, held=(), failing=()):
        self._client = client
        self._failing_client = failing_client
        self.held = set(held)
        self.failing = set(failing)
        self.gate = asyncio.Event()

    def __getattr__(self, name):
        return getattr(self._client, name)

    async def update_candidate(self, candidate_id, updates):
        if candidate_id in self.failing:
            return await self._failing_client.update_candidate(candidate_id, updates)
        if candidate_id in self.held:
            await self.gate.wait()
        return await self._client.update_candidate(candidate_id, updates)


@pytest.fixture
def applied_candidate(seeded_store):
    return seeded_store.find_first(EntityKind.CANDIDATE, stage="applied")


# ==================== Stage moves ==================== #

class TestOptimisticMove:
    @pytest.mark.asyncio
    async def test_success(self, make_client, seeded_store, applied_candidate):
        notifier = RecordingNotifier()
        timeline_before = seeded_store.count(EntityKind.TIMELINE)

        async with make_client() as client:
            board = CandidateBoard(client, notifier=notifier)
            await board.load()
            await board.load_timeline(applied_candidate.id)

            transition = board.drag_end(applied_candidate.id, "tech")

            assert transition.state is TransitionState.PENDING
            assert board.stage_of(applied_candidate.id) == "tech"
            assert applied_candidate.id in board.columns()["tech"]

            await transition.wait()

        assert transition.state is TransitionState.COMMITTED
        assert transition.settled
        assert notifier.successes == ["Candidate moved"]
        assert notifier.errors == []
        assert board.stage_of(applied_candidate.id) == "tech"
        assert seeded_store.get(EntityKind.CANDIDATE, applied_candidate.id).stage == "tech"
        assert seeded_store.count(EntityKind.TIMELINE) == timeline_before + 1
        assert board.timeline(applied_candidate.id)[-1]["stage"] == "tech"

    @pytest.mark.asyncio
    async def test_failure_rolls_back(self, make_client, seeded_store, applied_candidate):
        notifier = RecordingNotifier()
        timeline_before = seeded_store.count(EntityKind.TIMELINE)

        async with make_client(failure_rate=1.0) as client:
            board = CandidateBoard(client, notifier=notifier)
            await board.load()

            transition = board.drag_end(applied_candidate.id, "tech")
            assert board.stage_of(applied_candidate.id) == "tech"

            await transition.wait()

        assert transition.state is TransitionState.ROLLED_BACK
        assert isinstance(transition.error, httpx.NetworkError)
        assert notifier.errors == ["Failed to move candidate. Reverting."]
        assert notifier.successes == []
        assert board.stage_of(applied_candidate.id) == "applied"
        assert seeded_store.get(EntityKind.CANDIDATE, applied_candidate.id).stage == "applied"
        assert seeded_store.count(EntityKind.TIMELINE) == timeline_before

    @pytest.mark.asyncio
    async def test_rollback_patches_every_cached_view(self, make_client, applied_candidate):
        async with make_client(failure_rate=1.0) as client:
            board = CandidateBoard(client)
            await board.load(stage="applied")
            await board.load()

            transition = board.drag_end(applied_candidate.id, "offer")
            filtered = board.cache.get((CANDIDATES_VIEW, "", "applied", 1))
            moved = [c for c in filtered["data"] if c["id"] == applied_candidate.id]
            assert moved[0]["stage"] == "offer"

            await transition.wait()

        filtered = board.cache.get((CANDIDATES_VIEW, "", "applied", 1))
        assert applied_candidate.id in {c["id"] for c in filtered["data"]}
        assert all(c["stage"] == "applied" for c in filtered["data"])

    @pytest.mark.asyncio
    async def test_concurrent_moves_commit_independently(self, make_client, seeded_store):
        first, second = seeded_store.list(EntityKind.CANDIDATE)[:2]
        targets = {
            first.id: "hired" if first.stage != "hired" else "offer",
            second.id: "rejected" if second.stage != "rejected" else "screen",
        }

        async with make_client() as client:
            board = CandidateBoard(client)
            await board.load()
            transitions = [board.drag_end(cid, stage) for cid, stage in targets.items()]
            await asyncio.gather(*(t.wait() for t in transitions))

        assert all(t.state is TransitionState.COMMITTED for t in transitions)
        for cid, stage in targets.items():
            assert seeded_store.get(EntityKind.CANDIDATE, cid).stage == stage
            assert board.stage_of(cid) == stage

    @pytest.mark.asyncio
    async def test_slow_commit_survives_rollback_of_other_move(
        self, make_client, seeded_store, applied_candidate
    ):
        other = next(
            c for c in seeded_store.list(EntityKind.CANDIDATE)
            if c.id != applied_candidate.id and c.stage != "offer"
        )

        async with make_client() as client, make_client(failure_rate=1.0) as dead:
            routed = HeldMoves(client, dead, held=[applied_candidate.id], failing=[other.id])
            board = CandidateBoard(routed)
            await board.load()

            slow = board.drag_end(applied_candidate.id, "tech")
            failed = board.drag_end(other.id, "offer")
            await failed.wait()

            assert failed.state is TransitionState.ROLLED_BACK
            assert slow.state is TransitionState.PENDING
            assert board.stage_of(other.id) == other.stage
            assert board.stage_of(applied_candidate.id) == "tech"

            routed.gate.set()
            await slow.wait()

        assert slow.state is TransitionState.COMMITTED
        assert seeded_store.get(EntityKind.CANDIDATE, applied_candidate.id).stage == "tech"
        assert board.stage_of(applied_candidate.id) == "tech"
        assert board.stage_of(other.id) == other.stage

    @pytest.mark.asyncio
    async def test_commit_resyncs_views_from_store(self, make_client, seeded_store, applied_candidate):
        async with make_client() as client:
            board = CandidateBoard(client)
            await board.load()
            transition = board.drag_end(applied_candidate.id, "screen")

            # Another writer changes a different candidate behind the board's back
            other = next(
                c for c in seeded_store.list(EntityKind.CANDIDATE) if c.id != applied_candidate.id
            )
            seeded_store.update(EntityKind.CANDIDATE, other.id, {"stage": "hired"})

            await transition.wait()

        assert board.stage_of(applied_candidate.id) == "screen"
        assert board.stage_of(other.id) == "hired"
        assert not board.cache.entry(board.current_key).stale

    @pytest.mark.asyncio
    async def test_transition_exposes_its_task(self, make_client, applied_candidate):
        async with make_client() as client:
            board = CandidateBoard(client)
            await board.load()

            transition = board.drag_end(applied_candidate.id, "tech")
            assert transition.task is not None
            assert not transition.task.done()

            await transition.wait()

        assert transition.task.done()

    @pytest.mark.asyncio
    async def test_move_candidate_waits_for_outcome(self, make_client, applied_candidate):
        async with make_client() as client:
            board = CandidateBoard(client)
            await board.load()

            transition = await board.move_candidate(applied_candidate.id, "screen")

        assert transition.state is TransitionState.COMMITTED


class TestNoOpDrags:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("destination", ["applied", None, "interview"])
    async def test_stays_idle(self, make_client, seeded_store, applied_candidate, destination):
        notifier = RecordingNotifier()
        timeline_before = seeded_store.count(EntityKind.TIMELINE)

        async with make_client(failure_rate=1.0) as client:
            board = CandidateBoard(client, notifier=notifier)
            await board.load()

            transition = board.drag_end(applied_candidate.id, destination)
            await transition.wait()

        assert transition.state is TransitionState.IDLE
        assert board.stage_of(applied_candidate.id) == "applied"
        assert notifier.successes == notifier.errors == []
        assert seeded_store.count(EntityKind.TIMELINE) == timeline_before

    @pytest.mark.asyncio
    async def test_unknown_candidate(self, make_client):
        async with make_client() as client:
            board = CandidateBoard(client)
            await board.load()

            transition = board.drag_end("missing", "tech")

        assert transition.state is TransitionState.IDLE
        assert transition.source is None


# ==================== Stale responses ==================== #

class TestStaleResponses:
    @pytest.mark.asyncio
    async def test_response_for_old_filters_not_shown(self):
        client = GatedCandidates()
        board = CandidateBoard(client)

        old = asyncio.create_task(board.load(search="old"))
        await asyncio.sleep(0)
        new = asyncio.create_task(board.load(search="new"))
        await asyncio.sleep(0)

        client.release("old")
        assert await old is False

        client.release("new")
        assert await new is True
        assert [c["id"] for c in board.candidates()] == ["cand-new"]

    @pytest.mark.asyncio
    async def test_local_patch_supersedes_inflight_fetch(self):
        cache = QueryCache()
        gate = asyncio.Event()

        async def slow_fetch():
            await gate.wait()
            return {"data": [{"id": "c1", "stage": "applied"}]}

        cache.set(("candidates", "", "", 1), {"data": [{"id": "c1", "stage": "applied"}]})
        inflight = asyncio.create_task(cache.fetch(("candidates", "", "", 1), slow_fetch))
        await asyncio.sleep(0)

        cache.update_matching(("candidates",), lambda view: {"data": [{"id": "c1", "stage": "tech"}]})
        gate.set()

        assert await inflight is False
        assert cache.get(("candidates", "", "", 1))["data"][0]["stage"] == "tech"

    @pytest.mark.asyncio
    async def test_newer_fetch_wins(self):
        cache = QueryCache()
        gates = [asyncio.Event(), asyncio.Event()]

        def fetcher(index):
            async def fetch():
                await gates[index].wait()
                return index
            return fetch

        first = asyncio.create_task(cache.fetch(("view",), fetcher(0)))
        second = asyncio.create_task(cache.fetch(("view",), fetcher(1)))
        await asyncio.sleep(0)

        gates[1].set()
        assert await second is True
        gates[0].set()
        assert await first is False
        assert cache.get(("view",)) == 1


class TestRefetch:
    @pytest.mark.asyncio
    async def test_failed_refetch_leaves_entry_stale(self):
        cache = QueryCache()
        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) > 1:
                raise httpx.ConnectError("link down")
            return ["cached"]

        await cache.fetch(("timeline", "c1"), flaky)
        cache.invalidate(("timeline",))

        refreshed = await cache.refetch_stale(("timeline",))

        entry = cache.entry(("timeline", "c1"))
        assert refreshed == 0
        assert entry.stale
        assert isinstance(entry.error, httpx.ConnectError)
        assert entry.data == ["cached"]

    @pytest.mark.asyncio
    async def test_refetch_only_touches_matching_stale_entries(self):
        cache = QueryCache()
        calls = []

        def fetcher(name):
            async def fetch():
                calls.append(name)
                return name
            return fetch

        await cache.fetch(("candidates", "a"), fetcher("a"))
        await cache.fetch(("candidates", "b"), fetcher("b"))
        await cache.fetch(("jobs",), fetcher("jobs"))
        calls.clear()

        cache.invalidate(("candidates",))
        refreshed = await cache.refetch_stale(("candidates",))

        assert refreshed == 2
        assert sorted(calls) == ["a", "b"]
        assert not cache.entry(("candidates", "a")).stale
