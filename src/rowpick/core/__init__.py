"""Core modules for rowpick."""

from rowpick.core.errors import (
    ColumnMismatchError,
    InvalidParameterError,
    RowNotFoundError,
    RowPickError,
    SchemaLoadError,
    TooManyRowsError,
    UnknownTableError,
)
from rowpick.core.fetcher import RowFetcher
from rowpick.core.graph import RowGraph, create_nodes_by_level
from rowpick.core.graph_builder import RelationGraphBuilder
from rowpick.core.graphviz import parse_graph_table_columns, render_dot
from rowpick.core.insert_statements import into_insert_statements
from rowpick.core.metadata import SchemaMetadataLoader, build_table_registry
from rowpick.core.types import CellKind, CellValue, Column, ForeignKey, Row, Table, TableIdentity

__all__ = [
    # Types
    "CellKind",
    "CellValue",
    "Column",
    "ForeignKey",
    "Row",
    "Table",
    "TableIdentity",
    # Pipeline
    "SchemaMetadataLoader",
    "build_table_registry",
    "RowFetcher",
    "RelationGraphBuilder",
    "RowGraph",
    "create_nodes_by_level",
    "into_insert_statements",
    "parse_graph_table_columns",
    "render_dot",
    # Errors
    "RowPickError",
    "SchemaLoadError",
    "UnknownTableError",
    "RowNotFoundError",
    "TooManyRowsError",
    "InvalidParameterError",
    "ColumnMismatchError",
]
