"""Database client protocol definition.

Defines the ``DatabaseClient`` Protocol the sync engine consumes.  All
methods are ``async def`` -- the library is async-first.

Usage:
    from db_sync.adapters.base import DatabaseClient

    async def describe(client: DatabaseClient, name: str) -> None:
        kind = await client.relation_kind(name)
        columns = await client.columns(name)
        rows = await client.query("SELECT COUNT(*) FROM `t` WHERE id > %s", [10])
        await client.close()
"""

from collections.abc import Sequence
from typing import Any, Protocol

from db_sync.schema.models import ColumnInfo, RelationKind


class DatabaseClient(Protocol):
    """Database client interface that all adapters must implement.

    Metadata methods raise the driver's exception on failure; callers wrap
    them into the db-sync error taxonomy.
    """

    async def list_relations(self) -> list[str]:
        """Return the names of all tables and views in the database."""
        ...

    async def relation_kind(self, name: str) -> RelationKind:
        """Return ``VIEW`` if the database reports *name* as a view, else ``TABLE``."""
        ...

    async def columns(self, name: str) -> list[ColumnInfo]:
        """Return column metadata in declared order."""
        ...

    async def row_count(self, name: str) -> int:
        """Return ``COUNT(*)`` for the relation."""
        ...

    async def primary_key(self, name: str) -> list[str]:
        """Return primary key column names in key order (empty if none)."""
        ...

    async def native_create_statement(
        self, name: str, kind: RelationKind = RelationKind.TABLE
    ) -> str:
        """Return the database's own CREATE statement for the relation."""
        ...

    async def exists(self, name: str) -> bool:
        """Return True if a table or view named *name* exists."""
        ...

    async def execute(self, sql: str, params: Sequence[Any] | None = None) -> None:
        """Execute a statement that returns no rows.

        Without *params* the SQL is sent verbatim (no placeholder
        processing).  With *params*, ``%s`` placeholders are bound in order.

        Example:
            await client.execute("TRUNCATE TABLE `users`")
            await client.execute(
                "INSERT INTO `users` (`id`, `name`) VALUES (%s, %s)", [1, "Alice"]
            )
        """
        ...

    async def query(
        self, sql: str, params: Sequence[Any] | None = None
    ) -> list[tuple[Any, ...]]:
        """Run a statement and return all rows as tuples."""
        ...

    async def close(self) -> None:
        """Close the connection pool and clean up resources."""
        ...
