"""Bounded concurrent execution of per-relation sync jobs.

All jobs are launched at once; an ``asyncio.Semaphore`` of size
``concurrency`` admits at most that many into the synchronizer.  A job
admitted after the run was cancelled is skipped without an outcome.  Jobs
already running observe cancellation at their next batch checkpoint and
finish as failures.  ``run()`` returns only after every job has finished.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from db_sync.engine.context import SyncContext
from db_sync.engine.stats import OutcomeAggregator, RunStatistics, SyncOutcome
from db_sync.schema.models import RelationDescriptor

logger = logging.getLogger(__name__)


class Synchronizer(Protocol):
    """Anything that can sync one relation (``ObjectSynchronizer`` in practice)."""

    async def sync(self, descriptor: RelationDescriptor, ctx: SyncContext) -> SyncOutcome:
        ...


class Coordinator:
    """Runs a synchronizer over many relations with bounded parallelism.

    Args:
        synchronizer: Per-relation worker.
        concurrency: Maximum jobs in flight (values below 1 mean 1).
        timeout: Per-object deadline in seconds, measured from admission.
            ``None`` disables the deadline.
    """

    def __init__(
        self,
        synchronizer: Synchronizer,
        concurrency: int = 1,
        timeout: float | None = None,
    ) -> None:
        self._synchronizer = synchronizer
        self._concurrency = max(concurrency, 1)
        self._timeout = timeout

    @property
    def concurrency(self) -> int:
        return self._concurrency

    async def run(
        self,
        descriptors: Sequence[RelationDescriptor],
        ctx: SyncContext,
        aggregator: OutcomeAggregator,
    ) -> RunStatistics:
        """Sync every descriptor and return the finalized statistics.

        Outcomes are recorded into *aggregator* as jobs finish.
        """
        gate = asyncio.Semaphore(self._concurrency)
        total = len(descriptors)

        async def unit(index: int, descriptor: RelationDescriptor) -> None:
            async with gate:
                if ctx.cancelled:
                    logger.warning(
                        f"Run cancelled ({ctx.reason}), not starting {descriptor.name}"
                    )
                    return

                logger.info(f"Starting relation {index}/{total}: {descriptor.name}")
                job_ctx = ctx.child(self._timeout)
                try:
                    outcome = await self._synchronizer.sync(descriptor, job_ctx)
                except Exception as e:
                    logger.exception(f"Unexpected error syncing {descriptor.name}")
                    outcome = SyncOutcome(
                        name=descriptor.name, success=False, error=str(e)
                    )
                aggregator.record(outcome)

        await asyncio.gather(
            *(unit(i, d) for i, d in enumerate(descriptors, start=1))
        )
        return aggregator.finalize()
