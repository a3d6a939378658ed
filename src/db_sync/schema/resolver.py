"""Relation discovery and per-relation metadata resolution.

``discover()`` lists the source database's relations and applies the
include/exclude filters.  ``SchemaResolver.resolve()`` turns one name into
an immutable ``RelationDescriptor``: kind, columns, primary key, row count,
and a CREATE statement usable against the target.

Usage:
    from db_sync.schema.resolver import SchemaResolver, discover

    names = await discover(source, include=["user*"], exclude=["*_tmp"])
    resolver = SchemaResolver(source)
    descriptor = await resolver.resolve(names[0])
"""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from db_sync.errors import ResolutionError
from db_sync.schema.ddl import synthesize_create_statement
from db_sync.schema.filters import is_in_scope
from db_sync.schema.models import RelationDescriptor, RelationKind

if TYPE_CHECKING:
    from db_sync.adapters.base import DatabaseClient

logger = logging.getLogger(__name__)


async def discover(
    client: "DatabaseClient",
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
) -> list[str]:
    """Return the names of in-scope relations, in the order the database lists them.

    Raises:
        ResolutionError: If the relation listing itself fails.
    """
    logger.info("Discovering relations...")
    try:
        all_names = await client.list_relations()
    except Exception as e:
        raise ResolutionError("*", f"failed to list relations: {e}") from e

    logger.debug(f"Database holds {len(all_names)} relations")

    selected: list[str] = []
    for name in all_names:
        if is_in_scope(name, include, exclude):
            selected.append(name)
        else:
            logger.debug(f"Skipping relation: {name}")

    logger.info(f"Found {len(selected)} relations to sync")
    return selected


class SchemaResolver:
    """Builds ``RelationDescriptor`` objects from source metadata.

    Every metadata query is attempted once.  A failure raises
    ``ResolutionError`` except in two tolerated cases:

    - The primary key lookup fails: logged, key left empty.
    - ``SHOW CREATE TABLE`` fails: a CREATE TABLE is synthesized from the
      column list (indexes and constraints are lost).

    A view whose definition cannot be fetched fails outright.
    """

    def __init__(self, client: "DatabaseClient") -> None:
        self._client = client

    async def resolve(self, name: str) -> RelationDescriptor:
        """Resolve one relation.

        Args:
            name: Relation name in the source database.

        Returns:
            Frozen ``RelationDescriptor``.

        Raises:
            ResolutionError: If a required metadata query fails.
        """
        try:
            kind = await self._client.relation_kind(name)
        except Exception as e:
            raise ResolutionError(name, f"failed to determine relation kind: {e}") from e

        row_count = 0
        if kind is RelationKind.TABLE:
            try:
                row_count = await self._client.row_count(name)
            except Exception as e:
                raise ResolutionError(name, f"failed to count rows: {e}") from e

        try:
            columns = await self._client.columns(name)
        except Exception as e:
            raise ResolutionError(name, f"failed to read columns: {e}") from e

        primary_key: list[str] = []
        if kind is RelationKind.TABLE:
            try:
                primary_key = await self._client.primary_key(name)
            except Exception as e:
                logger.warning(f"Failed to read primary key of {name}: {e}")

        if kind is RelationKind.VIEW:
            try:
                create_statement = await self._client.native_create_statement(
                    name, RelationKind.VIEW
                )
            except Exception as e:
                raise ResolutionError(name, f"failed to read view definition: {e}") from e
        else:
            try:
                create_statement = await self._client.native_create_statement(
                    name, RelationKind.TABLE
                )
            except Exception as e:
                logger.warning(
                    f"Failed to read CREATE TABLE for {name}: {e}; "
                    "synthesizing one from column metadata"
                )
                create_statement = synthesize_create_statement(name, columns)

        descriptor = RelationDescriptor(
            name=name,
            kind=kind,
            columns=tuple(columns),
            primary_key=tuple(primary_key),
            row_count=row_count,
            create_statement=create_statement,
        )

        logger.info(
            f"Resolved {kind.value} {name}: {descriptor.row_count} rows, "
            f"{len(descriptor.columns)} columns, "
            f"primary key {list(descriptor.primary_key)}"
        )
        logger.debug(f"CREATE statement for {name}: {create_statement}")
        return descriptor
