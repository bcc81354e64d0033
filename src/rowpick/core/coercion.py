"""Value coercion between lookup strings, driver values and SQL literals.

Two directions:

* ``parse_parameter`` turns a CLI string into a typed query parameter based
  on the column's declared catalog type.
* ``render_literal`` turns a result cell into the literal text used in the
  generated ``INSERT`` statements.

``parse_literal`` is the inverse of ``render_literal`` and exists so the
round trip can be checked.
"""

from __future__ import annotations

import json
import math
import re
import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Optional, Sequence

from rowpick.core.errors import InvalidParameterError
from rowpick.core.types import NULL, CellKind, CellValue, Column

# Declared integer types and their signed bit width
INTEGER_TYPES = {
    "smallint": 16,
    "integer": 32,
    "bigint": 64,
}

UUID_TYPE = "uuid"
JSON_TYPES = ("json", "jsonb")

# What the integer input functions accept: optional sign, ASCII digits only
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_parameter(data_type: str, raw: str, column_name: Optional[str] = None) -> CellValue:
    """Build a typed query parameter from a string literal.

    Args:
        data_type: Declared catalog type of the lookup column
        raw: Value as typed by the user
        column_name: Column name, used in error messages only

    Returns:
        CellValue of kind INTEGER, UUID or TEXT

    Raises:
        InvalidParameterError: If ``raw`` is not valid for ``data_type``
    """
    data_type = data_type.lower()
    label = column_name or "value"

    if data_type in INTEGER_TYPES:
        digits = raw.strip()
        if not INTEGER_PATTERN.fullmatch(digits):
            raise InvalidParameterError(
                f"Cannot cast column '{label}' of value {raw!r} to {data_type}. "
                f"Error: not an integer",
                details={"column": column_name, "value": raw, "data_type": data_type},
            )
        parsed = int(digits)

        bits = INTEGER_TYPES[data_type]
        low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
        if not low <= parsed <= high:
            raise InvalidParameterError(
                f"Cannot cast column '{label}' of value {raw!r} to {data_type}. "
                f"Error: out of range [{low}, {high}]",
                details={"column": column_name, "value": raw, "data_type": data_type},
            )
        return CellValue(CellKind.INTEGER, parsed)

    if data_type == UUID_TYPE:
        try:
            return CellValue(CellKind.UUID, uuid.UUID(raw.strip()))
        except ValueError as e:
            raise InvalidParameterError(
                f"Cannot cast column '{label}' of value {raw!r} to uuid. Error: {e}",
                details={"column": column_name, "value": raw, "data_type": data_type},
            ) from e

    return CellValue(CellKind.TEXT, raw)


def cell_from_python(value: Any, data_type: Optional[str] = None) -> CellValue:
    """Wrap a driver-returned Python value into a CellValue.

    Args:
        value: Value as returned by the database driver
        data_type: Declared catalog type when known

    Returns:
        CellValue
    """
    if value is None:
        return NULL

    declared = data_type.lower() if data_type else None

    if declared == UUID_TYPE and isinstance(value, str):
        # uuid columns arrive as text when the driver has no uuid loader
        try:
            return CellValue(CellKind.UUID, uuid.UUID(value))
        except ValueError:
            return CellValue(CellKind.TEXT, value)

    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return CellValue(CellKind.BOOLEAN, value)
    if isinstance(value, int):
        return CellValue(CellKind.INTEGER, value)
    if isinstance(value, (float, Decimal)):
        return CellValue(CellKind.NUMERIC, value)
    if isinstance(value, uuid.UUID):
        return CellValue(CellKind.UUID, value)
    if isinstance(value, (datetime, date, time)):
        return CellValue(CellKind.TEXT, value.isoformat())
    if isinstance(value, timedelta):
        return CellValue(CellKind.TEXT, f"{value.total_seconds()} seconds")
    if isinstance(value, dict):
        return CellValue(CellKind.TEXT, json.dumps(value, default=str))
    if isinstance(value, (list, tuple)):
        # json/jsonb arrays and SQL arrays both arrive as lists
        if declared in JSON_TYPES:
            return CellValue(CellKind.TEXT, json.dumps(value, default=str))
        return CellValue(CellKind.TEXT, array_literal(value))
    if isinstance(value, (bytes, bytearray, memoryview)):
        return CellValue(CellKind.TEXT, "\\x" + bytes(value).hex())

    return CellValue(CellKind.TEXT, str(value))


def _non_finite(value: Any) -> Optional[str]:
    """Spelling of NaN and infinities, which must be quoted in SQL."""
    if isinstance(value, Decimal):
        if value.is_nan():
            return "NaN"
        if value.is_infinite():
            return "-Infinity" if value.is_signed() else "Infinity"
    elif isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "-Infinity" if value < 0 else "Infinity"
    return None


def array_literal(values: Sequence[Any]) -> str:
    """Render a sequence in PostgreSQL array text form, e.g. ``{1,NULL,"a b"}``.

    Nested sequences become nested arrays. Non-numeric elements are
    double-quoted with backslash escapes, as the array input parser expects.
    """
    return "{" + ",".join(_array_element(value) for value in values) + "}"


def _array_element(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, (list, tuple)):
        return array_literal(value)
    if isinstance(value, bool):
        return "t" if value else "f"
    if isinstance(value, (int, float, Decimal)):
        return _non_finite(value) or str(value)

    element = str(cell_from_python(value).value)
    return '"' + element.replace("\\", "\\\\").replace('"', '\\"') + '"'


def parameter_from_cell(column: Column, cell: CellValue) -> CellValue:
    """Turn a result cell into a parameter for a lookup on ``column``.

    Used when following an FK: the value read from one row is matched against
    a column of another table, so it is re-coerced to that column's type.
    """
    if cell.is_null:
        return NULL
    if cell.kind in (CellKind.INTEGER, CellKind.UUID) and column.data_type.lower() in (
        *INTEGER_TYPES,
        UUID_TYPE,
    ):
        return cell
    return parse_parameter(column.data_type, cell.display(), column.name)


def escape_string(value: str) -> str:
    """Quote a string as an SQL literal, doubling embedded single quotes."""
    return "'" + value.replace("'", "''") + "'"


def render_literal(cell: CellValue) -> str:
    """Render a cell as an SQL literal.

    Args:
        cell: Cell value

    Returns:
        Literal text suitable for a VALUES list
    """
    kind = cell.kind

    if kind is CellKind.NULL:
        return "NULL"
    if kind is CellKind.INTEGER:
        return str(int(cell.value))
    if kind is CellKind.NUMERIC:
        special = _non_finite(cell.value)
        if special is not None:
            return escape_string(special)
        return str(cell.value)
    if kind is CellKind.BOOLEAN:
        return "true" if cell.value else "false"

    # TEXT and UUID
    return escape_string(str(cell.value))


def parse_literal(literal: str, data_type: str) -> CellValue:
    """Parse a literal produced by ``render_literal`` back into a CellValue.

    Args:
        literal: SQL literal text
        data_type: Declared catalog type of the column

    Returns:
        CellValue

    Raises:
        InvalidParameterError: If the literal is malformed
    """
    literal = literal.strip()

    if literal.upper() == "NULL":
        return NULL

    if literal.startswith("'"):
        if len(literal) < 2 or not literal.endswith("'"):
            raise InvalidParameterError(
                f"Unterminated string literal {literal!r}",
                details={"value": literal},
            )
        body = literal[1:-1]
        # Only doubled quotes may appear inside the body
        if "'" in body.replace("''", ""):
            raise InvalidParameterError(
                f"Unescaped quote in string literal {literal!r}",
                details={"value": literal},
            )
        return parse_parameter(data_type, body.replace("''", "'"))

    if literal in ("true", "false"):
        return CellValue(CellKind.BOOLEAN, literal == "true")

    return parse_parameter(data_type, literal)
