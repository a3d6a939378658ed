"""Tests for the read/write value conversion table."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest

from db_sync.engine.values import NULL, Cell, CellKind, convert_row, to_cell


class TestToCell:
    @pytest.mark.parametrize(
        "value, kind, param",
        [
            (None, CellKind.NULL, None),
            (True, CellKind.INTEGER, 1),
            (7, CellKind.INTEGER, 7),
            (1.5, CellKind.FLOAT, 1.5),
            ("abc", CellKind.TEXT, "abc"),
            (Decimal("10.50"), CellKind.TEXT, "10.50"),
            (datetime(2024, 1, 2, 3, 4, 5), CellKind.TEXT, "2024-01-02 03:04:05"),
            (date(2024, 1, 2), CellKind.TEXT, "2024-01-02"),
            (time(3, 4, 5), CellKind.TEXT, "03:04:05"),
            ({"b", "a"}, CellKind.TEXT, "a,b"),
        ],
    )
    def test_conversion_table(self, value, kind, param):
        cell = to_cell(value)
        assert cell.kind is kind
        assert cell.to_param() == param

    def test_none_is_shared_null(self):
        assert to_cell(None) is NULL

    def test_decimal_keeps_exact_digits(self):
        assert to_cell(Decimal("0.1000000000000000055511")).value == (
            "0.1000000000000000055511"
        )


class TestTimedelta:
    """MySQL TIME values arrive as timedelta."""

    def test_positive(self):
        assert to_cell(timedelta(hours=26, minutes=3, seconds=4)).value == "26:03:04"

    def test_negative(self):
        assert to_cell(timedelta(hours=-1, minutes=30)).value == "-00:30:00"

    def test_microseconds(self):
        assert to_cell(timedelta(seconds=1, microseconds=5)).value == "00:00:01.000005"


class TestBytes:
    def test_text_bytes_decoded(self):
        """Bytes from a non-binary column become text."""
        cell = to_cell("héllo".encode("utf-8"))
        assert cell == Cell(CellKind.TEXT, "héllo")

    def test_binary_column_keeps_bytes(self):
        """Bytes from a binary column are never re-encoded."""
        cell = to_cell(b"abc", binary=True)
        assert cell.kind is CellKind.BYTES
        assert cell.value == b"abc"

    def test_undecodable_bytes_kept(self):
        cell = to_cell(b"\xff\xfe\x00")
        assert cell.kind is CellKind.BYTES
        assert cell.value == b"\xff\xfe\x00"

    def test_bytearray_normalized(self):
        cell = to_cell(bytearray(b"\x01\x02"), binary=True)
        assert cell.value == b"\x01\x02"
        assert isinstance(cell.value, bytes)


class TestConvertRow:
    def test_flags_apply_per_column(self):
        row = convert_row((1, b"ab", b"ab", None), [False, False, True, False])
        assert [c.kind for c in row] == [
            CellKind.INTEGER,
            CellKind.TEXT,
            CellKind.BYTES,
            CellKind.NULL,
        ]
        assert [c.to_param() for c in row] == [1, "ab", b"ab", None]


class TestCellToParam:
    """The bound parameter is typed by the cell's kind."""

    @pytest.mark.parametrize(
        "cell, expected",
        [
            (Cell(CellKind.NULL, "ignored"), None),
            (Cell(CellKind.INTEGER, "7"), 7),
            (Cell(CellKind.INTEGER, True), 1),
            (Cell(CellKind.FLOAT, 2), 2.0),
            (Cell(CellKind.TEXT, 12), "12"),
            (Cell(CellKind.BYTES, bytearray(b"\x00\x01")), b"\x00\x01"),
        ],
    )
    def test_conversion_by_kind(self, cell, expected):
        param = cell.to_param()
        assert param == expected
        assert type(param) is type(expected)

    def test_null_kind_never_binds_a_value(self):
        assert NULL.to_param() is None
