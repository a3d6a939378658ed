"""MySQL identifier quoting and fallback CREATE TABLE synthesis."""

from db_sync.schema.models import ColumnInfo

DEFAULT_ENGINE = "InnoDB"
DEFAULT_CHARSET = "utf8mb4"


def quote_identifier(name: str) -> str:
    """Backtick-quote an identifier, doubling embedded backticks.

    Example:
        >>> quote_identifier("order")
        '`order`'
        >>> quote_identifier("we`ird")
        '`we``ird`'
    """
    return "`" + name.replace("`", "``") + "`"


def column_definition(column: ColumnInfo) -> str:
    """Render one column as it appears inside CREATE TABLE."""
    definition = f"{quote_identifier(column.field)} {column.type}"
    if not column.nullable:
        definition += " NOT NULL"
    if column.default:
        escaped = column.default.replace("'", "''")
        definition += f" DEFAULT '{escaped}'"
    if column.extra:
        definition += f" {column.extra}"
    return definition


def synthesize_create_statement(
    table: str,
    columns: list[ColumnInfo] | tuple[ColumnInfo, ...],
    engine: str = DEFAULT_ENGINE,
    charset: str = DEFAULT_CHARSET,
) -> str:
    """Build a best-effort CREATE TABLE from column metadata.

    Used when ``SHOW CREATE TABLE`` fails.  Indexes, keys, and constraints
    are not reproduced; only each column's literal type, nullability,
    default, and extra attributes survive.

    Example:
        >>> cols = [ColumnInfo(field="id", type="int", nullable=False)]
        >>> print(synthesize_create_statement("t", cols))
        CREATE TABLE `t` (
          `id` int NOT NULL
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4
    """
    body = ",\n  ".join(column_definition(col) for col in columns)
    return (
        f"CREATE TABLE {quote_identifier(table)} (\n  {body}\n) "
        f"ENGINE={engine} DEFAULT CHARSET={charset}"
    )
