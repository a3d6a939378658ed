"""Tagged cell values and the read/write conversion table.

Rows read from the source are converted into sequences of ``Cell`` before
they are written to the target.  The conversion is explicit:

=============================  =========  ===============================
Driver value                   Kind       Parameter written
=============================  =========  ===============================
``None``                       NULL       ``None``
``bool`` / ``int``             INTEGER    ``int``
``float``                      FLOAT      ``float``
``Decimal``                    TEXT       ``str`` (exact digits)
``str``                        TEXT       ``str``
``datetime``/``date``/``time`` TEXT       ``str(value)``
``timedelta`` (MySQL TIME)     TEXT       ``[-]H:MM:SS[.ffffff]``
``bytes``, binary column       BYTES      ``bytes`` unchanged
``bytes``, UTF-8 decodable     TEXT       decoded ``str``
``bytes``, not decodable       BYTES      ``bytes`` unchanged
``set`` (MySQL SET)            TEXT       comma-joined members
anything else                  TEXT       ``str(value)``
=============================  =========  ===============================

Binary columns (BLOB, BINARY, BIT, geometry, ...) keep their bytes so
that payloads are never re-encoded.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any


class CellKind(str, Enum):
    NULL = "null"
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BYTES = "bytes"


@dataclass(frozen=True)
class Cell:
    """One transferred column value."""

    kind: CellKind
    value: Any = None

    def to_param(self) -> Any:
        """Return the value to bind in the target INSERT, typed by ``kind``.

        Example:
            >>> Cell(CellKind.INTEGER, "7").to_param()
            7
        """
        if self.kind is CellKind.NULL or self.value is None:
            return None
        if self.kind is CellKind.INTEGER:
            return int(self.value)
        if self.kind is CellKind.FLOAT:
            return float(self.value)
        if self.kind is CellKind.BYTES:
            return bytes(self.value)
        return str(self.value)


NULL = Cell(CellKind.NULL)


def _format_timedelta(value: timedelta) -> str:
    """Render a timedelta the way MySQL prints TIME values."""
    total_us = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)
    seconds, micros = divmod(total_us, 1_000_000)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}"
    if micros:
        text += f".{micros:06d}"
    return text


def to_cell(value: Any, binary: bool = False) -> Cell:
    """Convert a driver value into a ``Cell``.

    Args:
        value: Value as returned by the database driver.
        binary: Whether the source column has a binary declared type.

    Examples:
        >>> to_cell(b"abc").kind
        <CellKind.TEXT: 'text'>
        >>> to_cell(b"abc", binary=True).value
        b'abc'
        >>> to_cell(timedelta(hours=-1, minutes=30)).value
        '-00:30:00'
    """
    if value is None:
        return NULL
    if isinstance(value, bool):
        return Cell(CellKind.INTEGER, int(value))
    if isinstance(value, int):
        return Cell(CellKind.INTEGER, value)
    if isinstance(value, float):
        return Cell(CellKind.FLOAT, value)
    if isinstance(value, str):
        return Cell(CellKind.TEXT, value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        if binary:
            return Cell(CellKind.BYTES, raw)
        try:
            return Cell(CellKind.TEXT, raw.decode("utf-8"))
        except UnicodeDecodeError:
            return Cell(CellKind.BYTES, raw)
    if isinstance(value, Decimal):
        return Cell(CellKind.TEXT, str(value))
    if isinstance(value, timedelta):
        return Cell(CellKind.TEXT, _format_timedelta(value))
    if isinstance(value, (datetime, date, time)):
        return Cell(CellKind.TEXT, str(value))
    if isinstance(value, (set, frozenset)):
        return Cell(CellKind.TEXT, ",".join(sorted(str(v) for v in value)))
    return Cell(CellKind.TEXT, str(value))


def convert_row(values: tuple[Any, ...] | list[Any], binary_flags: list[bool]) -> list[Cell]:
    """Convert one driver row using per-column binary flags."""
    return [to_cell(v, flag) for v, flag in zip(values, binary_flags)]
