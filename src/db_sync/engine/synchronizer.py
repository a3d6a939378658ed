"""Per-relation schema reconciliation and batched data transfer.

For each relation the synchronizer:

1. Checks whether the target already holds a relation of that name.
2. Reconciles the target schema:

   - View: drop whatever exists under that name, then run the source's
     CREATE VIEW verbatim.  Nothing else happens for views.
   - Table missing at target: ``DROP TABLE IF EXISTS`` then the resolved
     CREATE statement.
   - Table present, truncate enabled: ``TRUNCATE TABLE`` (destructive).
   - Table present, truncate disabled: rows are appended.  Re-running
     duplicates rows unless a unique key rejects them.

3. Copies table rows in ``batch_size`` pages, strictly by ascending offset,
   writing each page as one multi-row INSERT before reading the next.

Cancellation and the per-object deadline are checked before each batch
read.  Any error becomes a failed ``SyncOutcome``; nothing is retried.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from db_sync.engine.context import SyncContext
from db_sync.engine.stats import SyncOutcome
from db_sync.engine.values import Cell, convert_row
from db_sync.errors import ReconciliationError, SyncError, TransferError
from db_sync.schema.ddl import quote_identifier
from db_sync.schema.models import RelationDescriptor, RelationKind

if TYPE_CHECKING:
    from db_sync.adapters.base import DatabaseClient

logger = logging.getLogger(__name__)


def _param_safe(identifier: str) -> str:
    """Quote an identifier for a statement that also carries %s parameters."""
    return quote_identifier(identifier).replace("%", "%%")


def build_select_sql(descriptor: RelationDescriptor) -> str:
    """SELECT one page of rows: declared columns in order, LIMIT/OFFSET bound.

    Rows are ordered by primary key when there is one so pages are stable.

    Example:
        >>> from db_sync.schema.models import ColumnInfo
        >>> d = RelationDescriptor(
        ...     name="t",
        ...     columns=(ColumnInfo(field="id", type="int"),),
        ...     primary_key=("id",),
        ... )
        >>> build_select_sql(d)
        'SELECT `id` FROM `t` ORDER BY `id` LIMIT %s OFFSET %s'
    """
    columns = ", ".join(_param_safe(name) for name in descriptor.column_names)
    sql = f"SELECT {columns} FROM {_param_safe(descriptor.name)}"
    if descriptor.has_primary_key:
        order = ", ".join(_param_safe(col) for col in descriptor.primary_key)
        sql += f" ORDER BY {order}"
    return sql + " LIMIT %s OFFSET %s"


def build_insert_sql(descriptor: RelationDescriptor, row_count: int) -> str:
    """Multi-row INSERT with one ``(%s, ...)`` group per row."""
    columns = ", ".join(_param_safe(name) for name in descriptor.column_names)
    group = "(" + ", ".join(["%s"] * len(descriptor.columns)) + ")"
    values = ", ".join([group] * row_count)
    return f"INSERT INTO {_param_safe(descriptor.name)} ({columns}) VALUES {values}"


@dataclass
class _Progress:
    rows: int = 0


class ObjectSynchronizer:
    """Syncs one relation at a time from *source* to *target*.

    Args:
        source: Client for the source database.
        target: Client for the target database.
        batch_size: Maximum rows per read/write round trip.
        truncate_before_sync: Clear pre-existing target tables first.
    """

    def __init__(
        self,
        source: "DatabaseClient",
        target: "DatabaseClient",
        batch_size: int,
        truncate_before_sync: bool = False,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be greater than 0")
        self._source = source
        self._target = target
        self._batch_size = batch_size
        self._truncate = truncate_before_sync

    async def sync(self, descriptor: RelationDescriptor, ctx: SyncContext) -> SyncOutcome:
        """Reconcile and (for tables) copy one relation.

        Returns:
            ``SyncOutcome``; ``success=False`` with the error message when
            any step fails or the context is cancelled mid-transfer.
        """
        name = descriptor.name
        progress = _Progress()
        logger.info(
            f"Syncing {descriptor.kind.value} {name} (rows: {descriptor.row_count})"
        )

        try:
            await self._reconcile(descriptor)
            if not descriptor.is_view:
                await self._transfer(descriptor, ctx, progress)
        except SyncError as e:
            logger.error(f"Failed to sync {name}: {e}")
            return SyncOutcome(
                name=name,
                success=False,
                error=str(e),
                rows_transferred=progress.rows,
            )

        return SyncOutcome(name=name, success=True, rows_transferred=progress.rows)

    # ------------------------------------------------------------------
    # Reconcile
    # ------------------------------------------------------------------

    async def _execute_ddl(self, sql: str, action: str) -> None:
        try:
            await self._target.execute(sql)
        except Exception as e:
            raise ReconciliationError(f"failed to {action}: {e}") from e

    async def _drop(self, name: str, kind: RelationKind) -> None:
        keyword = "VIEW" if kind is RelationKind.VIEW else "TABLE"
        await self._execute_ddl(
            f"DROP {keyword} IF EXISTS {quote_identifier(name)}",
            f"drop existing {kind.value} {name}",
        )

    async def _reconcile(self, descriptor: RelationDescriptor) -> None:
        name = descriptor.name
        try:
            exists = await self._target.exists(name)
            target_kind = await self._target.relation_kind(name) if exists else None
        except Exception as e:
            raise ReconciliationError(f"failed to inspect target relation: {e}") from e

        if descriptor.is_view:
            if exists:
                logger.info(f"Replacing existing {target_kind.value} {name} at target")
                await self._drop(name, target_kind)
            await self._execute_ddl(descriptor.create_statement, f"create view {name}")
            logger.info(f"View {name} created at target")
            return

        if exists and target_kind is RelationKind.VIEW:
            # A view is in the way; treat the table as missing
            await self._drop(name, RelationKind.VIEW)
            exists = False

        if not exists:
            logger.info(f"Target table {name} does not exist, creating it")
            await self._drop(name, RelationKind.TABLE)
            await self._execute_ddl(descriptor.create_statement, f"create table {name}")
        elif self._truncate:
            logger.info(f"Truncating target table {name}")
            await self._execute_ddl(
                f"TRUNCATE TABLE {quote_identifier(name)}", f"truncate table {name}"
            )
        else:
            logger.debug(f"Target table {name} exists, appending rows")

    # ------------------------------------------------------------------
    # Transfer
    # ------------------------------------------------------------------

    async def _transfer(
        self,
        descriptor: RelationDescriptor,
        ctx: SyncContext,
        progress: _Progress,
    ) -> None:
        name = descriptor.name
        total = descriptor.row_count
        if total == 0:
            logger.info(f"Table {name} is empty, skipping data transfer")
            return

        select_sql = build_select_sql(descriptor)
        binary_flags = [col.is_binary for col in descriptor.columns]
        total_batches = math.ceil(total / self._batch_size)
        started = time.monotonic()
        offset = 0
        batch_no = 0

        while offset < total:
            ctx.check()
            batch_no += 1

            try:
                raw_rows = await self._source.query(
                    select_sql, [self._batch_size, offset]
                )
            except Exception as e:
                raise TransferError(
                    f"failed to read batch at offset {offset}: {e}", offset
                ) from e

            if not raw_rows:
                logger.info(
                    f"Table {name}: source returned no rows at offset {offset}, "
                    "stopping early"
                )
                break

            rows = [convert_row(raw, binary_flags) for raw in raw_rows]
            try:
                await self._write_batch(descriptor, rows)
            except Exception as e:
                raise TransferError(
                    f"failed to write batch at offset {offset}: {e}", offset
                ) from e

            offset += len(rows)
            progress.rows = offset

            elapsed = time.monotonic() - started
            speed = offset / elapsed if elapsed > 0 else 0.0
            percent = offset / total * 100
            logger.info(
                f"Table {name}: batch {batch_no}/{total_batches}, "
                f"progress {percent:.2f}% ({offset}/{total}), {speed:.0f} rows/s"
            )

        elapsed = time.monotonic() - started
        logger.info(f"Table {name} done: {progress.rows} rows in {elapsed:.2f}s")

    async def _write_batch(
        self, descriptor: RelationDescriptor, rows: list[list[Cell]]
    ) -> None:
        if not rows:
            return
        sql = build_insert_sql(descriptor, len(rows))
        params = [cell.to_param() for row in rows for cell in row]
        await self._target.execute(sql, params)
