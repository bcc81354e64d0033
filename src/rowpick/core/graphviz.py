"""DOT rendering of a row graph."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Union

from rowpick.core.errors import GraphColumnsFormatError
from rowpick.core.graph import RowGraph
from rowpick.core.types import Row, TableIdentity

DisplayedColumns = Dict[TableIdentity, List[str]]


def parse_graph_table_columns(
    value: Union[str, Iterable[str], None], default_schema: str = "public"
) -> DisplayedColumns:
    """Parse ``table:col1|col2,schema.table2:col3`` into a lookup.

    Args:
        value: Comma separated string, or already split entries
        default_schema: Schema for tables given without one

    Returns:
        Dict mapping TableIdentity -> column names to show

    Raises:
        GraphColumnsFormatError: If an entry has no ``:`` separator
    """
    if not value:
        return {}

    entries = value.split(",") if isinstance(value, str) else list(value)
    displayed: DisplayedColumns = {}

    for entry in entries:
        entry = entry.strip()
        if not entry:
            continue

        table_part, sep, columns_part = entry.partition(":")
        if not sep or not table_part.strip():
            raise GraphColumnsFormatError(
                "Display table columns should be in format "
                f"{{table}}:{{column_1}}|{{column_n}}, got {entry!r} instead",
                details={"entry": entry},
            )

        table_id = TableIdentity.parse(table_part, default_schema)
        columns = [c.strip() for c in columns_part.split("|") if c.strip()]
        displayed.setdefault(table_id, []).extend(columns)

    return displayed


def node_label(row: Row, displayed_columns: Optional[Mapping[TableIdentity, List[str]]] = None) -> str:
    """Label of one row: its table, then the id or the selected columns."""
    lines = [f"`id` {row.id_display}"]

    fields = (displayed_columns or {}).get(row.table.identity)
    if fields:
        selected = [
            f"`{name}` {row.values[name].display()}"
            for name in fields
            if name in row.values
        ]
        if selected:
            lines = selected

    return "\n".join([str(row.table.identity), *lines])


def _escape(label: str) -> str:
    return label.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def render_dot(
    graph: RowGraph,
    displayed_columns: Optional[Mapping[TableIdentity, List[str]]] = None,
) -> str:
    """Render the graph as a DOT ``digraph``.

    One node per row, one edge per child -> parent relation that was
    traversed.
    """
    lines = ["digraph {"]

    for index, row in enumerate(graph.rows):
        lines.append(f'    {index} [ label = "{_escape(node_label(row, displayed_columns))}" ]')

    for edge in graph.edges:
        lines.append(f"    {edge.child} -> {edge.parent} [ ]")

    lines.append("}")
    return "\n".join(lines) + "\n"
