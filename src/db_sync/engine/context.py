"""Cooperative cancellation and per-object deadlines.

A ``SyncContext`` is checked at checkpoints (admission, before each batch
read); nothing is ever interrupted mid-statement.  Child contexts inherit
cancellation from their parent and may add their own deadline.

Usage:
    run_ctx = SyncContext()
    job_ctx = run_ctx.child(timeout=3600)

    run_ctx.cancel("interrupted")
    job_ctx.cancelled        # True
    job_ctx.check()          # raises SyncCancelledError
"""

import time

from db_sync.errors import SyncCancelledError


class SyncContext:
    """Cancellation signal with an optional monotonic deadline."""

    def __init__(
        self,
        timeout: float | None = None,
        parent: "SyncContext | None" = None,
    ) -> None:
        self._parent = parent
        self._timeout = timeout
        self._deadline: float | None = (
            time.monotonic() + timeout if timeout is not None else None
        )
        self._reason: str | None = None

    def child(self, timeout: float | None = None) -> "SyncContext":
        """Derive a context that is cancelled when this one is."""
        return SyncContext(timeout=timeout, parent=self)

    def cancel(self, reason: str = "sync cancelled") -> None:
        """Cancel this context and every context derived from it."""
        if self._reason is None:
            self._reason = reason

    @property
    def reason(self) -> str | None:
        """Why the context is done, or ``None`` while it is still live."""
        if self._reason is not None:
            return self._reason
        if self._parent is not None:
            parent_reason = self._parent.reason
            if parent_reason is not None:
                return parent_reason
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return f"timed out after {self._timeout:g}s"
        return None

    @property
    def cancelled(self) -> bool:
        return self.reason is not None

    def check(self) -> None:
        """Raise ``SyncCancelledError`` if the context is done."""
        reason = self.reason
        if reason is not None:
            raise SyncCancelledError(reason)
