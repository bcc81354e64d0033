"""rowpick - Extract a row and its foreign-key neighborhood as SQL."""

__version__ = "0.1.0"

# Connectors
from rowpick.connectors import DBConnector

# Core modules
from rowpick.core import (
    CellKind,
    CellValue,
    RelationGraphBuilder,
    Row,
    RowFetcher,
    RowGraph,
    RowPickError,
    SchemaMetadataLoader,
    Table,
    TableIdentity,
    create_nodes_by_level,
    into_insert_statements,
    render_dot,
)

# Utils
from rowpick.utils.config import Config, get_config, load_config

__all__ = [
    # Version
    "__version__",
    # Core
    "CellKind",
    "CellValue",
    "Row",
    "Table",
    "TableIdentity",
    "SchemaMetadataLoader",
    "RowFetcher",
    "RelationGraphBuilder",
    "RowGraph",
    "create_nodes_by_level",
    "into_insert_statements",
    "render_dot",
    "RowPickError",
    # Connectors
    "DBConnector",
    # Config
    "Config",
    "get_config",
    "load_config",
]
