"""Exception hierarchy for rowpick.

Every error carries a human-readable message plus a ``details`` dict with the
table identity, column and offending value where they apply, so a failure can
be diagnosed from the message alone. Nothing in the core recovers from these:
they abort the whole cherry-pick and reach the CLI unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RowPickError(Exception):
    """Base exception for all rowpick errors.

    Attributes:
        message: Human-readable error description
        details: Structured context for debugging
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        result: Dict[str, Any] = {
            "error": self.__class__.__name__,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ConfigError(RowPickError):
    """Raised when configuration is missing or malformed."""


class DatabaseConnectionError(RowPickError):
    """Raised when the source database cannot be reached."""


class SchemaLoadError(RowPickError):
    """Raised when the catalog query fails. No partial registry is returned."""


class UnknownTableError(RowPickError):
    """Raised when a table (or an FK target) is absent from the registry."""

    def __init__(self, table_id: Any, details: Optional[Dict[str, Any]] = None):
        self.table_id = table_id
        super().__init__(
            f"Table {table_id} not found in the loaded schema",
            details={"table": str(table_id), **(details or {})},
        )


class RowNotFoundError(RowPickError):
    """Raised when a single-row lookup matches zero rows."""

    def __init__(self, table_id: Any, column: str, value: Any):
        self.table_id = table_id
        self.column = column
        self.value = value
        super().__init__(
            f"Row with column {column} = {value!r} is not found in table {table_id}",
            details={"table": str(table_id), "column": column, "value": str(value)},
        )


class TooManyRowsError(RowPickError):
    """Raised when a lookup expected to be unique matches more than one row."""

    def __init__(
        self,
        count: int,
        table_id: Any = None,
        column: Optional[str] = None,
        value: Any = None,
    ):
        self.count = count
        super().__init__(
            f"Too many rows returned({count}), expecting only 1 "
            f"(table {table_id}, column {column} = {value!r})",
            details={
                "count": count,
                "table": str(table_id),
                "column": column,
                "value": str(value),
            },
        )


class InvalidParameterError(RowPickError):
    """Raised when a lookup value cannot be coerced to the column's declared type."""


class UnknownColumnError(InvalidParameterError):
    """Raised when the lookup column does not exist on the table."""

    def __init__(self, table_id: Any, column: str):
        self.table_id = table_id
        self.column = column
        super().__init__(
            f"Column {column} does not exist in table {table_id}",
            details={"table": str(table_id), "column": column},
        )


class ColumnMismatchError(RowPickError):
    """Raised when rows of one table/level have inconsistent column sets."""

    def __init__(self, table_id: Any, row_id: str, column: str):
        self.table_id = table_id
        self.row_id = row_id
        self.column = column
        super().__init__(
            f"Row {row_id} of table {table_id} has no column {column} "
            f"while other rows of the same statement do",
            details={"table": str(table_id), "row": row_id, "column": column},
        )


class GraphColumnsFormatError(RowPickError):
    """Raised when a graph table-columns entry is not ``table:col1|col2``."""
