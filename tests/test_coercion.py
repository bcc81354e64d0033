"""Tests for parameter parsing and SQL literal rendering."""

import uuid
from datetime import date, datetime
from decimal import Decimal

import pytest

from rowpick.core.coercion import (
    cell_from_python,
    parameter_from_cell,
    parse_literal,
    parse_parameter,
    render_literal,
)
from rowpick.core.errors import InvalidParameterError
from rowpick.core.types import NULL, CellKind, CellValue, Column

SAMPLE_UUID = "8f14e45f-ceea-4e7a-9b1c-2d5c6b9a0f11"


def test_parse_integer_parameter():
    assert parse_parameter("integer", "42") == CellValue(CellKind.INTEGER, 42)
    assert parse_parameter("bigint", "-9000000000") == CellValue(CellKind.INTEGER, -9000000000)


def test_parse_integer_rejects_garbage():
    with pytest.raises(InvalidParameterError) as exc_info:
        parse_parameter("integer", "abc", "id")
    assert "Cannot cast column 'id'" in exc_info.value.message
    assert exc_info.value.details["data_type"] == "integer"


def test_parse_integer_accepts_only_ascii_digits():
    assert parse_parameter("integer", " +5 ") == CellValue(CellKind.INTEGER, 5)
    for raw in ["1_000", "\u0661\u0662", "1.0", "", "--1"]:
        with pytest.raises(InvalidParameterError):
            parse_parameter("integer", raw, "id")


def test_parse_integer_checks_range():
    with pytest.raises(InvalidParameterError):
        parse_parameter("smallint", "40000")
    with pytest.raises(InvalidParameterError):
        parse_parameter("integer", "2147483648")
    assert parse_parameter("integer", "2147483647").value == 2147483647


def test_parse_uuid_parameter():
    cell = parse_parameter("uuid", SAMPLE_UUID)
    assert cell.kind is CellKind.UUID
    assert cell.value == uuid.UUID(SAMPLE_UUID)

    with pytest.raises(InvalidParameterError):
        parse_parameter("uuid", "not-a-uuid")


def test_other_types_stay_text():
    assert parse_parameter("character varying", "A-1") == CellValue(CellKind.TEXT, "A-1")
    assert parse_parameter("numeric", "3.5") == CellValue(CellKind.TEXT, "3.5")


def test_render_literals():
    assert render_literal(NULL) == "NULL"
    assert render_literal(CellValue(CellKind.INTEGER, 7)) == "7"
    assert render_literal(CellValue(CellKind.NUMERIC, Decimal("19.50"))) == "19.50"
    assert render_literal(CellValue(CellKind.BOOLEAN, True)) == "true"
    assert render_literal(CellValue(CellKind.TEXT, "O'Brien")) == "'O''Brien'"
    assert render_literal(CellValue(CellKind.UUID, uuid.UUID(SAMPLE_UUID))) == f"'{SAMPLE_UUID}'"


def test_render_special_floats():
    assert render_literal(CellValue(CellKind.NUMERIC, float("nan"))) == "'NaN'"
    assert render_literal(CellValue(CellKind.NUMERIC, float("inf"))) == "'Infinity'"
    assert render_literal(CellValue(CellKind.NUMERIC, float("-inf"))) == "'-Infinity'"


def test_text_literal_round_trip():
    """Quotes survive rendering and parsing back."""
    for text in ["", "plain", "O'Brien", "''", "it's 'quoted'", "back\\slash"]:
        literal = render_literal(CellValue(CellKind.TEXT, text))
        assert parse_literal(literal, "text") == CellValue(CellKind.TEXT, text)


def test_parse_literal_rejects_unescaped_quote():
    with pytest.raises(InvalidParameterError):
        parse_literal("'O'Brien'", "text")
    with pytest.raises(InvalidParameterError):
        parse_literal("'open", "text")


def test_parse_literal_other_kinds():
    assert parse_literal("NULL", "integer") == NULL
    assert parse_literal("12", "integer") == CellValue(CellKind.INTEGER, 12)
    assert parse_literal("false", "boolean") == CellValue(CellKind.BOOLEAN, False)
    assert parse_literal(f"'{SAMPLE_UUID}'", "uuid").kind is CellKind.UUID


def test_cell_from_python():
    assert cell_from_python(None) == NULL
    assert cell_from_python(True) == CellValue(CellKind.BOOLEAN, True)
    assert cell_from_python(3) == CellValue(CellKind.INTEGER, 3)
    assert cell_from_python(Decimal("1.5")).kind is CellKind.NUMERIC
    assert cell_from_python(date(2024, 1, 2)) == CellValue(CellKind.TEXT, "2024-01-02")
    assert cell_from_python(datetime(2024, 1, 2, 3, 4, 5)).value == "2024-01-02T03:04:05"
    assert cell_from_python({"a": 1}) == CellValue(CellKind.TEXT, '{"a": 1}')
    assert cell_from_python(b"\x01\xff") == CellValue(CellKind.TEXT, "\\x01ff")


def test_cell_from_python_uses_declared_uuid_type():
    assert cell_from_python(SAMPLE_UUID, "uuid").kind is CellKind.UUID
    assert cell_from_python(SAMPLE_UUID).kind is CellKind.TEXT


def test_parameter_from_cell():
    """FK values are re-coerced to the target column's type."""
    assert parameter_from_cell(Column("id", "integer"), CellValue(CellKind.INTEGER, 5)) == CellValue(
        CellKind.INTEGER, 5
    )
    assert parameter_from_cell(Column("id", "bigint"), CellValue(CellKind.TEXT, "5")) == CellValue(
        CellKind.INTEGER, 5
    )
    assert parameter_from_cell(Column("code", "text"), CellValue(CellKind.INTEGER, 5)) == CellValue(
        CellKind.TEXT, "5"
    )
    assert parameter_from_cell(Column("id", "integer"), NULL) == NULL


def test_parameter_literal_round_trip():
    """Rendering a parsed parameter and parsing it back gives the same value."""
    cases = [
        ("integer", "-17"),
        ("bigint", "9000000000"),
        ("uuid", SAMPLE_UUID),
        ("text", "it's"),
        ("character varying", "x''y"),
    ]
    for data_type, raw in cases:
        parsed = parse_parameter(data_type, raw)
        assert parse_literal(render_literal(parsed), data_type) == parsed


def test_render_special_decimals():
    assert render_literal(cell_from_python(Decimal("NaN"))) == "'NaN'"
    assert render_literal(cell_from_python(Decimal("Infinity"))) == "'Infinity'"
    assert render_literal(cell_from_python(Decimal("-Infinity"))) == "'-Infinity'"


def test_lists_render_as_array_literals():
    assert render_literal(cell_from_python([1, 2])) == "'{1,2}'"
    assert render_literal(cell_from_python(["a", "b"])) == "'{\"a\",\"b\"}'"
    assert render_literal(cell_from_python([[1, 2], [3, None]])) == "'{{1,2},{3,NULL}}'"
    assert render_literal(cell_from_python([True, False])) == "'{t,f}'"
    assert render_literal(cell_from_python([])) == "'{}'"


def test_array_elements_are_escaped():
    cell = cell_from_python(['say "hi"', None, "it's", "back\\slash"])
    assert render_literal(cell) == r"""'{"say \"hi\"",NULL,"it''s","back\\slash"}'"""
    assert parse_literal(render_literal(cell), "ARRAY") == cell


def test_json_lists_stay_json():
    assert cell_from_python([1, 2], "jsonb") == CellValue(CellKind.TEXT, "[1, 2]")
    assert cell_from_python([{"a": 1}], "json") == CellValue(CellKind.TEXT, '[{"a": 1}]')
    assert render_literal(cell_from_python([1, 2], "JSONB")) == "'[1, 2]'"
