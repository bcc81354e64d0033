"""Schema and row data types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class TableIdentity:
    """Schema-qualified table name, case-sensitive."""

    schema: str
    name: str

    @classmethod
    def parse(cls, value: str, default_schema: str = "public") -> TableIdentity:
        """Parse ``schema.table`` or bare ``table``.

        Args:
            value: Table reference
            default_schema: Schema used when ``value`` has none

        Returns:
            TableIdentity instance
        """
        value = value.strip()
        if "." in value:
            schema, name = value.split(".", 1)
            return cls(schema.strip(), name.strip())
        return cls(default_schema, value)

    def quoted(self) -> str:
        """Render as a double-quoted SQL identifier."""
        return f"{quote_identifier(self.schema)}.{quote_identifier(self.name)}"

    def __str__(self) -> str:
        return f"{self.schema}.{self.name}"


@dataclass(frozen=True)
class Column:
    """Column name with its declared catalog data type."""

    name: str
    data_type: str


@dataclass(frozen=True)
class ForeignKey:
    """One directed FK edge.

    On a table's ``referencing`` map, ``column`` is the table's own column and
    ``foreign_table`` the parent. On a ``referenced`` map, ``column`` is the
    child's column and ``foreign_table`` the child table.
    """

    constraint_name: str
    column: Column
    foreign_table: TableIdentity

    def __repr__(self) -> str:
        return f"FK({self.constraint_name}: {self.column.name} -> {self.foreign_table})"


@dataclass(frozen=True)
class Table:
    """Table registry entry, built once by the metadata loader."""

    identity: TableIdentity
    primary_column: Column
    referencing: Dict[str, ForeignKey] = field(
        default_factory=dict, compare=False, hash=False
    )  # constraint_name -> FK owned by this table (towards parents)
    referenced: Dict[str, ForeignKey] = field(
        default_factory=dict, compare=False, hash=False
    )  # constraint_name -> FK owned by a child table pointing here

    def get_column(self, column_name: str) -> Optional[Column]:
        """Return the declared column if it is the PK or a referencing FK column."""
        if self.primary_column.name == column_name:
            return self.primary_column
        for fk in self.referencing.values():
            if fk.column.name == column_name:
                return fk.column
        return None

    def __repr__(self) -> str:
        return (
            f"Table({self.identity}, pk={self.primary_column.name}, "
            f"referencing={len(self.referencing)}, referenced={len(self.referenced)})"
        )


class CellKind(str, Enum):
    """Closed set of cell value kinds."""

    INTEGER = "integer"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    TEXT = "text"
    UUID = "uuid"
    NULL = "null"


@dataclass(frozen=True)
class CellValue:
    """Tagged column value, used both as query parameter and result cell."""

    kind: CellKind
    value: Any = None

    @property
    def is_null(self) -> bool:
        return self.kind is CellKind.NULL

    def display(self) -> str:
        """Human-readable rendering without SQL quoting."""
        if self.kind is CellKind.NULL:
            return "NULL"
        if self.kind is CellKind.BOOLEAN:
            return "true" if self.value else "false"
        return str(self.value)


NULL = CellValue(CellKind.NULL)


@dataclass(eq=False)
class Row:
    """A fetched row.

    Equality and hashing use ``(table identity, id_display)``, the same key
    the emitter deduplicates on.
    """

    table: Table
    id_display: str
    values: Dict[str, CellValue]  # column_name -> value, in result column order

    @property
    def key(self) -> Tuple[TableIdentity, str]:
        return (self.table.identity, self.id_display)

    def column_names(self) -> List[str]:
        return list(self.values.keys())

    def get(self, column_name: str) -> CellValue:
        """Get a cell by column name.

        Raises:
            KeyError: If the row has no such column
        """
        return self.values[column_name]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"Row({self.table.identity}, id={self.id_display})"


def quote_identifier(name: str) -> str:
    """Double-quote an SQL identifier, doubling embedded quotes."""
    return '"' + name.replace('"', '""') + '"'
