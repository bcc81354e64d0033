"""Business logic for the cherry-pick command."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from rowpick.connectors import DBConnector
from rowpick.core.fetcher import RowFetcher
from rowpick.core.graph import create_nodes_by_level, format_nodes_by_level
from rowpick.core.graph_builder import RelationGraphBuilder
from rowpick.core.graphviz import parse_graph_table_columns, render_dot
from rowpick.core.insert_statements import into_insert_statements
from rowpick.core.metadata import SchemaMetadataLoader
from rowpick.core.types import TableIdentity
from rowpick.utils.config import Config
from rowpick.utils.logging import get_logger

logger = get_logger(__name__)


class OutputFormat(str, Enum):
    """Cherry-pick output formats."""

    INSERT_STATEMENT = "insert-statement"
    GRAPHVIZ = "graphviz"

    @classmethod
    def from_str(cls, value: str) -> OutputFormat:
        """Parse a format name, falling back to insert statements."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            logger.warning(f"Unknown output format {value!r}, using {cls.INSERT_STATEMENT.value}")
            return cls.INSERT_STATEMENT


@dataclass
class CherryPickRequest:
    """Seed locator and rendering options for one cherry-pick run."""

    schema: str
    table: str
    column: str
    value: str
    output_format: OutputFormat = OutputFormat.INSERT_STATEMENT
    graph_table_columns: Optional[str] = None

    @property
    def table_id(self) -> TableIdentity:
        return TableIdentity(self.schema, self.table)


class CherryPickHandler:
    """Handler for cherry-pick operations.

    Keeps the click command thin: the command parses options, the handler
    wires loader, builder and renderers together.

    Example:
        >>> handler = CherryPickHandler(config)
        >>> output = handler.run("staging", CherryPickRequest("public", "orders", "id", "42"))
    """

    def __init__(self, config: Config):
        """Initialize handler.

        Args:
            config: Configuration instance
        """
        self.config = config

    def open_connector(self, source_db: str) -> DBConnector:
        """Create the connector for a configured source database."""
        return DBConnector.from_config(source_db, self.config.get_connection(source_db))

    def run(self, source_db: str, request: CherryPickRequest) -> str:
        """Cherry-pick from a configured source database.

        Args:
            source_db: Name under ``db.connection_by_name``
            request: Seed locator and output options

        Returns:
            Rendered output (SQL or DOT)
        """
        connector = self.open_connector(source_db)
        try:
            with connector.connect() as connection:
                return self.cherry_pick(connection, request)
        finally:
            connector.close()

    def cherry_pick(self, connection, request: CherryPickRequest) -> str:
        """Cherry-pick over an already open connection.

        The full output is rendered before it is returned, so a failure at
        any stage produces no partial output.

        Args:
            connection: SQLAlchemy connection
            request: Seed locator and output options

        Returns:
            Rendered output (SQL or DOT)
        """
        displayed_columns = parse_graph_table_columns(
            request.graph_table_columns, default_schema=request.schema
        )

        registry = SchemaMetadataLoader(connection).load_table_structure(request.schema)

        builder = RelationGraphBuilder(RowFetcher(connection), registry)
        graph, root = builder.fetch_as_graph(request.table_id, request.column, request.value)

        if request.output_format is OutputFormat.GRAPHVIZ:
            return render_dot(graph, displayed_columns)

        nodes_by_level = create_nodes_by_level(graph, root, 0)
        logger.debug("Rows by level:\n" + format_nodes_by_level(graph, nodes_by_level))

        statements = into_insert_statements(graph.rows_by_level(nodes_by_level))
        logger.info(f"Generated {len(statements)} insert statements")

        return "\n".join(statements)
