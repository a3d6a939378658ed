"""Pydantic models describing relations discovered in the source database.

``RelationDescriptor`` is built once per run by the ``SchemaResolver`` and
is frozen afterwards; the synchronizer only reads it.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

# Declared-type prefixes whose bytes payloads are passed through unchanged
BINARY_TYPE_PREFIXES = (
    "binary",
    "varbinary",
    "tinyblob",
    "blob",
    "mediumblob",
    "longblob",
    "bit",
    "geometry",
    "point",
    "linestring",
    "polygon",
    "multipoint",
    "multilinestring",
    "multipolygon",
    "geometrycollection",
    "geomcollection",
)


class RelationKind(str, Enum):
    """Kind of relation: base table or view."""

    TABLE = "table"
    VIEW = "view"


class ColumnInfo(BaseModel):
    """One column as reported by ``SHOW COLUMNS``.

    Example:
        >>> col = ColumnInfo(field="id", type="int", nullable=False, extra="auto_increment")
        >>> col.is_binary
        False
    """

    model_config = ConfigDict(frozen=True)

    field: str
    type: str
    nullable: bool = True
    default: str | None = None
    key: str = ""  # PRI, UNI, MUL
    extra: str = ""  # e.g. auto_increment

    @property
    def is_binary(self) -> bool:
        """True when the declared type stores raw bytes."""
        return self.type.strip().lower().startswith(BINARY_TYPE_PREFIXES)


class RelationDescriptor(BaseModel):
    """Everything the synchronizer needs to know about one relation."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: RelationKind = RelationKind.TABLE
    columns: tuple[ColumnInfo, ...] = ()
    primary_key: tuple[str, ...] = ()
    row_count: int = 0  # Snapshot at discovery; always 0 for views
    create_statement: str = ""

    @property
    def is_view(self) -> bool:
        return self.kind is RelationKind.VIEW

    @property
    def column_names(self) -> list[str]:
        """Column names in declared order."""
        return [col.field for col in self.columns]

    @property
    def has_primary_key(self) -> bool:
        return len(self.primary_key) > 0
