"""Exception taxonomy for db-sync.

All errors raised by the sync engine derive from ``SyncError`` so callers
can catch one type.  Per-relation errors (resolution, reconciliation,
transfer, cancellation) are captured into that relation's ``SyncOutcome``
and never abort sibling relations.
"""


class SyncError(Exception):
    """Base class for db-sync errors."""

    pass


class ConfigurationError(SyncError):
    """Raised when the configuration file is missing or invalid."""

    pass


class ResolutionError(SyncError):
    """Raised when a metadata query for one relation fails."""

    def __init__(self, relation: str, message: str) -> None:
        super().__init__(message)
        self.relation = relation


class ReconciliationError(SyncError):
    """Raised when target DDL, existence check, or truncate fails."""

    pass


class TransferError(SyncError):
    """Raised when a batch read or batch write fails."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(message)
        self.offset = offset


class SyncCancelledError(SyncError):
    """Raised at a checkpoint when the run was cancelled or the object timed out."""

    pass
