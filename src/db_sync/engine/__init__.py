"""Sync engine: contexts, value conversion, synchronizer, coordinator, stats.

Usage:
    from db_sync.engine import SyncContext, synchronize_all
"""

from db_sync.engine.context import SyncContext
from db_sync.engine.coordinator import Coordinator
from db_sync.engine.runner import synchronize_all
from db_sync.engine.stats import (
    FailedRelation,
    OutcomeAggregator,
    RunStatistics,
    SyncOutcome,
)
from db_sync.engine.synchronizer import ObjectSynchronizer
from db_sync.engine.values import Cell, CellKind, to_cell

__all__ = [
    "SyncContext",
    "Coordinator",
    "ObjectSynchronizer",
    "synchronize_all",
    "SyncOutcome",
    "RunStatistics",
    "FailedRelation",
    "OutcomeAggregator",
    "Cell",
    "CellKind",
    "to_cell",
]
