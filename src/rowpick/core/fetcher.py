"""Parameterized row lookups by column name and value."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy import text

from rowpick.core.coercion import cell_from_python, parse_parameter
from rowpick.core.errors import (
    RowNotFoundError,
    TooManyRowsError,
    UnknownColumnError,
)
from rowpick.core.types import (
    CellKind,
    CellValue,
    Column,
    Row,
    Table,
    TableIdentity,
    quote_identifier,
)
from rowpick.utils.logging import get_logger

logger = get_logger(__name__)

COLUMN_TYPES_QUERY = """
SELECT column_name, data_type
FROM information_schema.columns
WHERE table_schema = :schema AND table_name = :table
ORDER BY ordinal_position
"""


def build_select(table: Table, column_name: str, value: CellValue) -> Any:
    """Build ``SELECT *`` filtered on one column.

    Identifiers are quoted and the value is always a bind parameter.
    """
    placeholder = "CAST(:value AS uuid)" if value.kind is CellKind.UUID else ":value"
    return text(
        f"SELECT * FROM {table.identity.quoted()} "
        f"WHERE {quote_identifier(column_name)} = {placeholder}"
    )


def bind_value(value: CellValue) -> Any:
    """Python value handed to the driver for a parameter."""
    if value.kind is CellKind.UUID:
        return str(value.value)
    return value.value


class RowFetcher:
    """Fetch rows of registry tables over a single connection.

    Example:
        >>> fetcher = RowFetcher(conn)
        >>> row = fetcher.get_one(orders_table, "code", "A-1")
        >>> items = fetcher.get_many(items_table, "order_id", row.get("id"))
    """

    def __init__(self, connection):
        """Initialize fetcher.

        Args:
            connection: SQLAlchemy connection (or anything with ``execute``)
        """
        self.connection = connection
        self._column_types: Dict[TableIdentity, Dict[str, str]] = {}

    def get_column_types(self, table: Table) -> Dict[str, str]:
        """Declared data type of every column of ``table``, queried once per table."""
        column_types = self._column_types.get(table.identity)
        if column_types is None:
            result = self.connection.execute(
                text(COLUMN_TYPES_QUERY),
                {"schema": table.identity.schema, "table": table.identity.name},
            )
            column_types = {
                row._mapping["column_name"]: row._mapping["data_type"] for row in result
            }
            self._column_types[table.identity] = column_types
        return column_types

    def get_column(self, table: Table, column_name: str) -> Column:
        """Resolve the declared type of a column.

        Key columns come from the registry, anything else from the catalog.

        Raises:
            UnknownColumnError: If the table has no such column
        """
        column = table.get_column(column_name)
        if column is not None:
            return column

        data_type = self.get_column_types(table).get(column_name)
        if data_type is None:
            raise UnknownColumnError(table.identity, column_name)
        return Column(column_name, data_type)

    def find_rows(self, table: Table, column_name: str, value: CellValue) -> List[Row]:
        """Run the lookup and wrap every result row."""
        column_types = self.get_column_types(table)
        statement = build_select(table, column_name, value)

        logger.debug(f"Fetching {table.identity} where {column_name} = {value.display()}")

        result = self.connection.execute(statement, {"value": bind_value(value)})
        rows = [self.to_row(table, row._mapping, column_types) for row in result]

        logger.debug(f"  {len(rows)} rows from {table.identity}")
        return rows

    def get_one(
        self, table: Table, column_name: str, value: Union[str, CellValue]
    ) -> Row:
        """Fetch exactly one row.

        Args:
            table: Table to query
            column_name: Lookup column, expected to be unique
            value: Raw string (coerced to the column's type) or typed value

        Returns:
            The matching row

        Raises:
            InvalidParameterError: If a string value cannot be coerced
            RowNotFoundError: If nothing matches
            TooManyRowsError: If more than one row matches
        """
        if isinstance(value, str):
            column = self.get_column(table, column_name)
            value = parse_parameter(column.data_type, value, column_name)

        rows = self.find_rows(table, column_name, value)

        if not rows:
            raise RowNotFoundError(table.identity, column_name, value.display())
        if len(rows) > 1:
            raise TooManyRowsError(
                len(rows), table.identity, column_name, value.display()
            )

        return rows[0]

    def get_many(self, table: Table, column_name: str, value: CellValue) -> List[Row]:
        """Fetch zero or more rows whose ``column_name`` equals ``value``."""
        return self.find_rows(table, column_name, value)

    @staticmethod
    def to_row(
        table: Table,
        mapping: Mapping[str, Any],
        column_types: Optional[Mapping[str, str]] = None,
    ) -> Row:
        """Wrap a result mapping into a Row.

        Key columns are typed from the registry, the rest from ``column_types``.
        """
        values: Dict[str, CellValue] = {}
        for name, raw in mapping.items():
            declared = table.get_column(name)
            if declared is not None:
                data_type = declared.data_type
            else:
                data_type = (column_types or {}).get(name)
            values[name] = cell_from_python(raw, data_type)

        primary = table.primary_column.name
        if primary not in values:
            raise UnknownColumnError(table.identity, primary)

        return Row(table=table, id_display=values[primary].display(), values=values)
