"""db-sync: copy MySQL tables and views between databases.

Discovers relations by include/exclude glob patterns, recreates their
schema at the target on demand, and copies rows in bounded batches under a
configurable degree of parallelism.

Usage:
    from db_sync import load_config, connect_datasource, discover, synchronize_all
    from db_sync import SyncContext, RunStatistics
"""

__version__ = "1.0.0"

# Errors
from db_sync.errors import (
    ConfigurationError,
    ReconciliationError,
    ResolutionError,
    SyncCancelledError,
    SyncError,
    TransferError,
)

# Schema
from db_sync.schema import (
    ColumnInfo,
    RelationDescriptor,
    RelationKind,
    SchemaResolver,
    discover,
    is_in_scope,
)

# Adapters
from db_sync.adapters.base import DatabaseClient
from db_sync.adapters.mysql import AsyncMySQLAdapter

# Config
from db_sync.config import AppConfig, DataSourceConfig, SyncSettings, load_config

# Engine
from db_sync.engine import (
    Coordinator,
    ObjectSynchronizer,
    OutcomeAggregator,
    RunStatistics,
    SyncContext,
    SyncOutcome,
    synchronize_all,
)

# Factory
from db_sync.factory import connect_datasource, create_adapter

__all__ = [
    # Errors
    "SyncError",
    "ConfigurationError",
    "ResolutionError",
    "ReconciliationError",
    "TransferError",
    "SyncCancelledError",
    # Schema
    "ColumnInfo",
    "RelationDescriptor",
    "RelationKind",
    "SchemaResolver",
    "discover",
    "is_in_scope",
    # Adapters
    "DatabaseClient",
    "AsyncMySQLAdapter",
    # Config
    "AppConfig",
    "DataSourceConfig",
    "SyncSettings",
    "load_config",
    # Engine
    "SyncContext",
    "Coordinator",
    "ObjectSynchronizer",
    "OutcomeAggregator",
    "RunStatistics",
    "SyncOutcome",
    "synchronize_all",
    # Factory
    "connect_datasource",
    "create_adapter",
]
