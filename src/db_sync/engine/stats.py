"""Per-relation outcomes and thread-safe run statistics.

``OutcomeAggregator`` is the only writer of ``RunStatistics``: every
outcome goes through ``record()`` under a lock, and ``finalize()`` stamps
the end time once all jobs are done.

Usage:
    aggregator = OutcomeAggregator(total_relations=3, total_rows=1200)
    aggregator.record(SyncOutcome(name="users", success=True, rows_transferred=1000))
    aggregator.record(SyncOutcome(name="orders", success=False, error="boom"))
    stats = aggregator.finalize()
    print(stats.format_report())
"""

import threading
import time
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SyncOutcome(BaseModel):
    """Result of syncing one relation.  Produced exactly once per job."""

    model_config = ConfigDict(frozen=True)

    name: str
    success: bool
    error: str = ""  # Empty on success
    rows_transferred: int = 0


class FailedRelation(BaseModel):
    """A relation that failed, with its error message."""

    name: str
    error: str


class RunStatistics(BaseModel):
    """Run-level counters.

    Example:
        >>> stats = RunStatistics(total_relations=2)
        >>> stats.succeeded + stats.failed <= stats.total_relations
        True
    """

    total_relations: int = 0
    succeeded: int = 0
    failed: int = 0
    total_rows: int = 0  # Rows discovered across resolved tables
    rows_transferred: int = 0
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: datetime | None = None
    elapsed_seconds: float | None = None  # Monotonic; set by OutcomeAggregator
    failures: list[FailedRelation] = Field(default_factory=list)

    @property
    def duration(self) -> float:
        """Elapsed seconds of the run.

        Uses the monotonic ``elapsed_seconds`` when recorded; otherwise falls
        back to the wall-clock timestamps, never going below zero.
        """
        if self.elapsed_seconds is not None:
            return self.elapsed_seconds
        end = self.finished_at or datetime.now()
        return max((end - self.started_at).total_seconds(), 0.0)

    @property
    def rows_per_second(self) -> float:
        """Aggregate throughput; 0 when no time has elapsed."""
        duration = self.duration
        if duration <= 0:
            return 0.0
        return self.rows_transferred / duration

    @property
    def not_attempted(self) -> int:
        """Relations neither succeeded nor failed (skipped by cancellation)."""
        return self.total_relations - self.succeeded - self.failed

    def format_report(self) -> str:
        """Format statistics as a human-readable report."""
        lines = [
            "Sync finished" if self.failed == 0 else "Sync finished with failures",
            f"  Relations: {self.total_relations}",
            f"  Succeeded: {self.succeeded}",
            f"  Failed: {self.failed}",
        ]
        if self.not_attempted:
            lines.append(f"  Not attempted: {self.not_attempted}")
        lines.append(f"  Rows discovered: {self.total_rows}")
        lines.append(f"  Rows transferred: {self.rows_transferred}")
        lines.append(f"  Duration: {self.duration:.2f}s")
        if self.duration > 0:
            lines.append(f"  Throughput: {self.rows_per_second:.0f} rows/s")

        if self.failures:
            lines.append(f"\n  Failed relations ({len(self.failures)}):")
            for failure in self.failures:
                lines.append(f"    - {failure.name}: {failure.error}")

        return "\n".join(lines)


class OutcomeAggregator:
    """Accumulates ``SyncOutcome`` values into ``RunStatistics``.

    Safe to call from multiple threads or tasks.  Each relation name may be
    recorded once; a second outcome for the same name raises ``ValueError``.
    """

    def __init__(
        self,
        total_relations: int,
        total_rows: int = 0,
        started_at: datetime | None = None,
        started_monotonic: float | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._started_monotonic = (
            started_monotonic if started_monotonic is not None else time.monotonic()
        )
        self._recorded: set[str] = set()
        self._finalized = False
        self._stats = RunStatistics(
            total_relations=total_relations,
            total_rows=total_rows,
            started_at=started_at or datetime.now(),
        )

    def record(self, outcome: SyncOutcome) -> None:
        """Fold one outcome into the statistics."""
        with self._lock:
            if self._finalized:
                raise RuntimeError("cannot record outcomes after finalize()")
            if outcome.name in self._recorded:
                raise ValueError(f"outcome for {outcome.name} already recorded")
            if len(self._recorded) >= self._stats.total_relations:
                raise ValueError(
                    f"more outcomes than relations considered ({self._stats.total_relations})"
                )
            self._recorded.add(outcome.name)

            if outcome.success:
                self._stats.succeeded += 1
                self._stats.rows_transferred += outcome.rows_transferred
            else:
                # Partially written rows of a failed relation are not counted
                self._stats.failed += 1
                self._stats.failures.append(
                    FailedRelation(name=outcome.name, error=outcome.error)
                )

    def snapshot(self) -> RunStatistics:
        """Return a consistent copy of the current statistics."""
        with self._lock:
            snapshot = self._stats.model_copy(deep=True)
        if snapshot.elapsed_seconds is None:
            snapshot.elapsed_seconds = self._elapsed()
        return snapshot

    def finalize(self) -> RunStatistics:
        """Stamp the end time and return the final statistics."""
        with self._lock:
            if not self._finalized:
                self._stats.finished_at = datetime.now()
                self._stats.elapsed_seconds = self._elapsed()
                self._finalized = True
            return self._stats.model_copy(deep=True)

    def _elapsed(self) -> float:
        return max(time.monotonic() - self._started_monotonic, 0.0)
