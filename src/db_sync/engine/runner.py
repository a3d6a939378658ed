"""Run-level entry point: resolve relations, sync them, aggregate outcomes.

Usage:
    from db_sync.engine.runner import synchronize_all
    from db_sync.engine.context import SyncContext
    from db_sync.schema.resolver import discover

    names = await discover(source, settings.include_tables, settings.exclude_tables)
    stats = await synchronize_all(source, target, names, settings, SyncContext())
    if stats.failed:
        ...
"""

import logging
import time
from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from db_sync.config.models import SyncSettings
from db_sync.engine.context import SyncContext
from db_sync.engine.coordinator import Coordinator
from db_sync.engine.stats import OutcomeAggregator, RunStatistics, SyncOutcome
from db_sync.engine.synchronizer import ObjectSynchronizer
from db_sync.errors import ResolutionError, SyncCancelledError
from db_sync.schema.models import RelationDescriptor
from db_sync.schema.resolver import SchemaResolver

if TYPE_CHECKING:
    from db_sync.adapters.base import DatabaseClient

logger = logging.getLogger(__name__)

BANNER = "=" * 30


async def synchronize_all(
    source: "DatabaseClient",
    target: "DatabaseClient",
    names: Sequence[str],
    settings: SyncSettings,
    ctx: SyncContext | None = None,
) -> RunStatistics:
    """Synchronize every named relation from *source* to *target*.

    Relations are resolved one by one first.  A resolution failure is
    recorded as that relation's failure and the rest continue.  Cancellation
    observed while resolving aborts the whole run before any job starts.

    Args:
        source: Source database client.
        target: Target database client.
        names: In-scope relation names, usually from ``discover()``.
        settings: ``sync`` section of the configuration.
        ctx: Run-level context; cancel it to stop admitting new jobs.

    Returns:
        Finalized ``RunStatistics``.

    Raises:
        SyncCancelledError: If the run is cancelled during resolution.
    """
    ctx = ctx or SyncContext()
    started_at = datetime.now()
    started_monotonic = time.monotonic()

    logger.info(BANNER)
    logger.info("Starting database sync")
    logger.info(f"Batch size: {settings.batch_size}")
    logger.info(f"Concurrency: {settings.concurrency}")
    logger.info(f"Truncate before sync: {settings.truncate_before_sync}")
    logger.info(f"Relations: {len(names)}")
    logger.info(BANNER)

    resolver = SchemaResolver(source)
    descriptors: list[RelationDescriptor] = []
    resolution_failures: list[SyncOutcome] = []

    for name in names:
        if ctx.cancelled:
            logger.warning("Metadata collection cancelled")
            raise SyncCancelledError(ctx.reason or "sync cancelled")
        try:
            descriptors.append(await resolver.resolve(name))
        except ResolutionError as e:
            logger.error(f"Failed to resolve metadata for {name}: {e}")
            resolution_failures.append(
                SyncOutcome(name=name, success=False, error=str(e))
            )

    aggregator = OutcomeAggregator(
        total_relations=len(names),
        total_rows=sum(d.row_count for d in descriptors),
        started_at=started_at,
        started_monotonic=started_monotonic,
    )
    for outcome in resolution_failures:
        aggregator.record(outcome)

    logger.info(f"Total rows to sync: {sum(d.row_count for d in descriptors)}")

    synchronizer = ObjectSynchronizer(
        source,
        target,
        batch_size=settings.batch_size,
        truncate_before_sync=settings.truncate_before_sync,
    )
    coordinator = Coordinator(
        synchronizer,
        concurrency=settings.concurrency,
        timeout=settings.timeout,
    )
    stats = await coordinator.run(descriptors, ctx, aggregator)

    log_summary(stats)
    return stats


def log_summary(stats: RunStatistics) -> None:
    """Log the end-of-run summary and every failure."""
    logger.info(BANNER)
    logger.info("Database sync finished")
    logger.info(f"Relations: {stats.total_relations}")
    logger.info(f"Succeeded: {stats.succeeded}")
    logger.info(f"Failed: {stats.failed}")
    if stats.not_attempted:
        logger.warning(f"Not attempted: {stats.not_attempted}")
    logger.info(f"Rows discovered: {stats.total_rows}")
    logger.info(f"Rows transferred: {stats.rows_transferred}")
    logger.info(f"Duration: {stats.duration:.2f}s")
    if stats.duration > 0:
        logger.info(f"Average speed: {stats.rows_per_second:.0f} rows/s")
    logger.info(BANNER)

    if stats.failures:
        logger.warning("The following relations failed:")
        for failure in stats.failures:
            logger.warning(f"  - {failure.name}: {failure.error}")
