"""Tests for ``SyncContext`` and the bounded-concurrency ``Coordinator``."""

import asyncio

import pytest

from db_sync.engine.context import SyncContext
from db_sync.engine.coordinator import Coordinator
from db_sync.engine.stats import OutcomeAggregator, SyncOutcome
from db_sync.errors import SyncCancelledError
from db_sync.schema.models import RelationDescriptor


def _descriptors(n: int) -> list[RelationDescriptor]:
    return [RelationDescriptor(name=f"t{i}", row_count=i) for i in range(n)]


class _RecordingSynchronizer:
    """Fake synchronizer that tracks how many jobs are in flight."""

    def __init__(self, delay: float = 0.01, fail: set[str] | None = None) -> None:
        self.delay = delay
        self.fail = fail or set()
        self.in_flight = 0
        self.max_in_flight = 0
        self.started: list[str] = []
        self.contexts: list[SyncContext] = []

    async def sync(self, descriptor, ctx):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.started.append(descriptor.name)
        self.contexts.append(ctx)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        if descriptor.name in self.fail:
            return SyncOutcome(name=descriptor.name, success=False, error="boom")
        return SyncOutcome(
            name=descriptor.name, success=True, rows_transferred=descriptor.row_count
        )


# ============================================================================
# SyncContext
# ============================================================================


class TestSyncContext:
    def test_live_by_default(self):
        ctx = SyncContext()
        assert not ctx.cancelled
        assert ctx.reason is None
        ctx.check()

    def test_cancel_sets_reason(self):
        ctx = SyncContext()
        ctx.cancel("interrupted")
        assert ctx.cancelled
        with pytest.raises(SyncCancelledError, match="interrupted"):
            ctx.check()

    def test_first_reason_wins(self):
        ctx = SyncContext()
        ctx.cancel("first")
        ctx.cancel("second")
        assert ctx.reason == "first"

    def test_child_inherits_cancellation(self):
        parent = SyncContext()
        child = parent.child(timeout=60)
        assert not child.cancelled
        parent.cancel("stop")
        assert child.reason == "stop"

    def test_child_cancel_does_not_reach_parent(self):
        parent = SyncContext()
        child = parent.child()
        child.cancel()
        assert child.cancelled
        assert not parent.cancelled

    def test_deadline(self):
        ctx = SyncContext(timeout=0)
        assert ctx.reason == "timed out after 0s"

    def test_no_deadline_when_timeout_none(self):
        assert not SyncContext(timeout=None).cancelled


# ============================================================================
# Coordinator
# ============================================================================


class TestCoordinatorConcurrency:
    @pytest.mark.parametrize("concurrency", [1, 2, 4])
    async def test_in_flight_bounded(self, concurrency):
        """Never more than ``concurrency`` jobs run at once."""
        sync = _RecordingSynchronizer()
        aggregator = OutcomeAggregator(total_relations=8)

        stats = await Coordinator(sync, concurrency=concurrency).run(
            _descriptors(8), SyncContext(), aggregator
        )

        assert sync.max_in_flight <= concurrency
        assert stats.succeeded == 8
        assert stats.failed == 0

    async def test_parallelism_actually_used(self):
        sync = _RecordingSynchronizer(delay=0.02)
        await Coordinator(sync, concurrency=4).run(
            _descriptors(8), SyncContext(), OutcomeAggregator(8)
        )
        assert sync.max_in_flight > 1

    @pytest.mark.parametrize("value", [0, -3])
    def test_concurrency_clamped(self, value):
        assert Coordinator(_RecordingSynchronizer(), concurrency=value).concurrency == 1

    async def test_every_outcome_recorded(self):
        sync = _RecordingSynchronizer(fail={"t1", "t3"})
        stats = await Coordinator(sync, concurrency=3).run(
            _descriptors(5), SyncContext(), OutcomeAggregator(5, total_rows=10)
        )
        assert stats.succeeded == 3
        assert stats.failed == 2
        assert stats.succeeded + stats.failed == stats.total_relations
        assert sorted(f.name for f in stats.failures) == ["t1", "t3"]
        # Successful rows only: t0 + t2 + t4
        assert stats.rows_transferred == 0 + 2 + 4
        assert stats.finished_at is not None

    async def test_empty_run(self):
        stats = await Coordinator(_RecordingSynchronizer()).run(
            [], SyncContext(), OutcomeAggregator(0)
        )
        assert stats.total_relations == 0
        assert stats.finished_at is not None


class TestCoordinatorJobs:
    async def test_jobs_get_child_context_with_timeout(self):
        sync = _RecordingSynchronizer()
        run_ctx = SyncContext()
        await Coordinator(sync, timeout=0).run(
            _descriptors(1), run_ctx, OutcomeAggregator(1)
        )
        (job_ctx,) = sync.contexts
        assert job_ctx is not run_ctx
        assert job_ctx.reason == "timed out after 0s"
        assert not run_ctx.cancelled

    async def test_unexpected_exception_becomes_failure(self):
        class Exploding:
            async def sync(self, descriptor, ctx):
                raise KeyError("surprise")

        stats = await Coordinator(Exploding()).run(
            _descriptors(2), SyncContext(), OutcomeAggregator(2)
        )
        assert stats.failed == 2
        assert "surprise" in stats.failures[0].error


class TestCoordinatorCancellation:
    async def test_cancelled_before_start_runs_nothing(self):
        """Jobs admitted after cancellation produce no outcome."""
        sync = _RecordingSynchronizer()
        ctx = SyncContext()
        ctx.cancel("interrupted")

        stats = await Coordinator(sync, concurrency=2).run(
            _descriptors(4), ctx, OutcomeAggregator(4)
        )

        assert sync.started == []
        assert stats.succeeded == 0
        assert stats.failed == 0
        assert stats.not_attempted == 4

    async def test_cancel_mid_run_skips_pending(self):
        """With one worker, cancelling during the first job skips the rest."""
        ctx = SyncContext()

        class CancelOnFirst(_RecordingSynchronizer):
            async def sync(self, descriptor, job_ctx):
                outcome = await super().sync(descriptor, job_ctx)
                ctx.cancel("interrupted")
                return outcome

        sync = CancelOnFirst()
        stats = await Coordinator(sync, concurrency=1).run(
            _descriptors(3), ctx, OutcomeAggregator(3)
        )

        assert sync.started == ["t0"]
        assert stats.succeeded == 1
        assert stats.succeeded + stats.failed < stats.total_relations
