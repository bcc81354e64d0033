"""Render leveled rows as dependency-ordered INSERT statements."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Set, Tuple

from rowpick.core.coercion import render_literal
from rowpick.core.errors import ColumnMismatchError
from rowpick.core.types import CellKind, Row, Table, TableIdentity, quote_identifier
from rowpick.utils.logging import get_logger

logger = get_logger(__name__)

BANNER = "-" * 48
FOOTER = "-" * 15


def into_insert_statements(rows_by_level: Mapping[int, Iterable[Row]]) -> List[str]:
    """Convert rows grouped by level into INSERT statements.

    Levels are walked in ascending order, so the deepest ancestors come
    first and every row is inserted after the rows it references, as long
    as the FK graph between the picked rows has no cycle. A row already
    emitted at a lower level is skipped.

    Args:
        rows_by_level: Dict mapping level -> rows at that level

    Returns:
        One statement block per table per level, in emission order

    Raises:
        ColumnMismatchError: If rows of one table have different columns
    """
    emitted: Set[Tuple[TableIdentity, str]] = set()
    statements: List[str] = []

    for level in sorted(rows_by_level):
        pending: List[Row] = []

        for row in rows_by_level[level]:
            if row.key in emitted:
                continue
            emitted.add(row.key)
            pending.append(row)

        level_statements = table_rows_into_insert_statements(pending)
        logger.debug(f"Level {level}: {len(pending)} rows, {len(level_statements)} statements")
        statements.extend(level_statements)

    return statements


def table_rows_into_insert_statements(rows: Iterable[Row]) -> List[str]:
    """Group rows by table and render one statement per table.

    Tables are ordered by ``schema.name`` so output is stable.
    """
    tables: Dict[TableIdentity, Table] = {}
    rows_by_table: Dict[TableIdentity, List[Row]] = defaultdict(list)

    for row in rows:
        tables[row.table.identity] = row.table
        rows_by_table[row.table.identity].append(row)

    return [
        table_rows_into_insert_statement(tables[table_id], rows_by_table[table_id])
        for table_id in sorted(rows_by_table, key=str)
    ]


def table_rows_into_insert_statement(table: Table, rows: List[Row]) -> str:
    """Render one INSERT for rows of a single table.

    Column order is taken from the first row.

    Raises:
        ColumnMismatchError: If a later row lacks a column of the first row
    """
    rows = sorted(rows, key=_row_sort_key)
    column_names = rows[0].column_names()

    value_lines: List[str] = []
    for row in rows:
        literals: List[str] = []
        for column_name in column_names:
            if column_name not in row.values:
                raise ColumnMismatchError(table.identity, row.id_display, column_name)
            literals.append(render_literal(row.values[column_name]))
        value_lines.append(f"  ({', '.join(literals)})")

    columns = ", ".join(quote_identifier(name) for name in column_names)
    values = ",\n".join(value_lines)

    return (
        f"{BANNER}\n"
        f"-- insert into table {table.identity}\n"
        f"{BANNER}\n"
        f"INSERT INTO {table.identity.quoted()} ({columns}) VALUES\n"
        f"{values};\n"
        f"{FOOTER}\n"
    )


def _row_sort_key(row: Row):
    cell = row.values.get(row.table.primary_column.name)
    if cell is not None and cell.kind is CellKind.INTEGER:
        return (0, cell.value, "")
    return (1, 0, row.id_display)
