"""Tests for ``synchronize_all``: resolution, scheduling, and aggregation."""

from unittest.mock import AsyncMock

import pytest

from db_sync.config.models import SyncSettings
from db_sync.engine.context import SyncContext
from db_sync.engine.runner import synchronize_all
from db_sync.errors import SyncCancelledError
from db_sync.schema.models import ColumnInfo, RelationKind

COLUMNS = [ColumnInfo(field="id", type="int", nullable=False)]


def _settings(**overrides) -> SyncSettings:
    values = {"source": "a", "target": "b", "batch_size": 2, "concurrency": 2}
    values.update(overrides)
    return SyncSettings(**values)


def _make_source(tables: dict[str, list[tuple]], broken: set[str] | None = None) -> AsyncMock:
    """Source serving *tables*; names in *broken* fail the column lookup."""
    broken = broken or set()
    source = AsyncMock()
    source.relation_kind = AsyncMock(return_value=RelationKind.TABLE)
    source.primary_key = AsyncMock(return_value=["id"])
    source.native_create_statement = AsyncMock(
        side_effect=lambda name, kind: f"CREATE TABLE `{name}` (`id` int)"
    )

    async def _row_count(name):
        return len(tables[name])

    async def _columns(name):
        if name in broken:
            raise RuntimeError("table is marked as crashed")
        return COLUMNS

    async def _query(sql, params=None):
        name = sql.split("FROM `", 1)[1].split("`", 1)[0]
        limit, offset = params
        return tables[name][offset : offset + limit]

    source.row_count = AsyncMock(side_effect=_row_count)
    source.columns = AsyncMock(side_effect=_columns)
    source.query = AsyncMock(side_effect=_query)
    return source


def _make_target() -> AsyncMock:
    target = AsyncMock()
    target.exists = AsyncMock(return_value=False)
    target.execute = AsyncMock()
    return target


class TestSynchronizeAll:
    async def test_all_relations_synced(self):
        tables = {"a": [(1,), (2,), (3,)], "b": [], "c": [(9,)]}
        stats = await synchronize_all(
            _make_source(tables), _make_target(), list(tables), _settings()
        )
        assert stats.total_relations == 3
        assert stats.succeeded == 3
        assert stats.failed == 0
        assert stats.total_rows == 4
        assert stats.rows_transferred == 4
        assert stats.finished_at is not None

    async def test_resolution_failure_counted_and_others_continue(self):
        tables = {"good": [(1,)], "bad": [(1,), (2,)]}
        target = _make_target()
        stats = await synchronize_all(
            _make_source(tables, broken={"bad"}),
            target,
            ["good", "bad"],
            _settings(),
        )
        assert stats.succeeded == 1
        assert stats.failed == 1
        assert stats.failures[0].name == "bad"
        assert "crashed" in stats.failures[0].error
        # Unresolved relations contribute no discovered rows
        assert stats.total_rows == 1
        created = [c.args[0] for c in target.execute.await_args_list]
        assert not any("`bad`" in sql for sql in created)

    async def test_cancelled_during_resolution_raises(self):
        ctx = SyncContext()
        ctx.cancel("interrupted")
        with pytest.raises(SyncCancelledError, match="interrupted"):
            await synchronize_all(
                _make_source({"a": []}), _make_target(), ["a"], _settings(), ctx
            )

    async def test_no_names(self):
        stats = await synchronize_all(
            _make_source({}), _make_target(), [], _settings()
        )
        assert stats.total_relations == 0
        assert stats.succeeded == stats.failed == 0
