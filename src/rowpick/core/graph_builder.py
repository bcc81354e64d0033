"""Relation graph builder.

Starting from a seed row, walks foreign keys in both directions:

* ascend: follow the row's own FKs up to the parent rows it references;
* descend: fetch every child row referencing the current row, then ascend
  from each child (to pick up its other parents) and descend further.

Each walk direction keeps the set of tables it is currently expanding. An FK
leading into a table already on the current path is not followed in that
direction, which bounds recursion on self-referencing or mutually-referencing
tables. The same table is still expanded normally for a different row reached
along another branch.
"""

from __future__ import annotations

from typing import FrozenSet, Tuple

from rowpick.core.coercion import parameter_from_cell
from rowpick.core.errors import UnknownTableError
from rowpick.core.fetcher import RowFetcher
from rowpick.core.graph import RowGraph
from rowpick.core.metadata import TableRegistry
from rowpick.core.types import Row, Table, TableIdentity
from rowpick.utils.logging import get_logger

logger = get_logger(__name__)


class RelationGraphBuilder:
    """Build the row graph around one seed row.

    Example:
        >>> builder = RelationGraphBuilder(RowFetcher(conn), registry)
        >>> graph, root = builder.fetch_as_graph(
        ...     TableIdentity("public", "orders"), "id", "42"
        ... )
    """

    def __init__(self, fetcher: RowFetcher, registry: TableRegistry):
        """Initialize builder.

        Args:
            fetcher: Row fetcher bound to the source connection
            registry: Table registry from the metadata loader
        """
        self.fetcher = fetcher
        self.registry = registry

    def fetch_as_graph(
        self, table_id: TableIdentity, column_name: str, column_value: str
    ) -> Tuple[RowGraph, int]:
        """Fetch the seed row and every row connected to it.

        Args:
            table_id: Seed table
            column_name: Lookup column (not necessarily the primary key)
            column_value: Lookup value as a string

        Returns:
            Tuple of (graph, seed node index)

        Raises:
            UnknownTableError: If the seed table or an FK target is not loaded
            RowNotFoundError: If the seed or a referenced parent is missing
            TooManyRowsError: If the seed lookup is not unique
            InvalidParameterError: If the value does not fit the column type
        """
        table = self.get_table(table_id)

        seed = self.fetcher.get_one(table, column_name, column_value)
        logger.info(f"Seed row {seed.table.identity} id={seed.id_display}")

        graph = RowGraph()
        root = graph.add_node(seed)

        # Parents only; siblings of the seed are not needed
        self.fill_referencing_rows(graph, seed)

        # Children, and the other parents of those children
        self.fill_referenced_rows(graph, seed)

        logger.info(
            f"Collected {len(graph)} rows and {len(graph.edges)} relations "
            f"around {seed.table.identity} id={seed.id_display}"
        )

        return graph, root

    def get_table(self, table_id: TableIdentity) -> Table:
        table = self.registry.get(table_id)
        if table is None:
            raise UnknownTableError(table_id)
        return table

    def fill_referencing_rows(
        self,
        graph: RowGraph,
        current_row: Row,
        expanding: FrozenSet[TableIdentity] = frozenset(),
    ) -> None:
        """Ascend from ``current_row`` through the FKs its table owns."""
        table_id = current_row.table.identity
        expanding = expanding | {table_id}
        current_node = graph.node_of(current_row)

        for constraint_name, fk in sorted(current_row.table.referencing.items()):
            if fk.foreign_table in expanding:
                logger.debug(
                    f"Not ascending {constraint_name} into {fk.foreign_table}, "
                    f"already expanding it on this path"
                )
                continue

            foreign_table = self.get_table(fk.foreign_table)
            cell = current_row.get(fk.column.name)

            if cell.is_null:
                logger.debug(
                    f"{table_id} id={current_row.id_display}: "
                    f"{fk.column.name} is null, skipping {constraint_name}"
                )
                continue

            parent_row = self.fetcher.get_one(
                foreign_table,
                foreign_table.primary_column.name,
                parameter_from_cell(foreign_table.primary_column, cell),
            )

            parent_node = graph.add_node(parent_row)
            graph.add_edge(current_node, parent_node, constraint_name)

            self.fill_referencing_rows(graph, graph.row(parent_node), expanding)

    def fill_referenced_rows(
        self,
        graph: RowGraph,
        current_row: Row,
        expanding: FrozenSet[TableIdentity] = frozenset(),
    ) -> None:
        """Descend to rows referencing ``current_row``, and their other parents."""
        expanding = expanding | {current_row.table.identity}
        current_node = graph.node_of(current_row)
        primary_cell = current_row.get(current_row.table.primary_column.name)

        for constraint_name, fk in sorted(current_row.table.referenced.items()):
            if fk.foreign_table in expanding:
                logger.debug(
                    f"Not descending {constraint_name} into {fk.foreign_table}, "
                    f"already expanding it on this path"
                )
                continue

            child_table = self.get_table(fk.foreign_table)

            children = self.fetcher.get_many(
                child_table,
                fk.column.name,
                parameter_from_cell(fk.column, primary_cell),
            )

            for child_row in children:
                child_node = graph.add_node(child_row)
                graph.add_edge(child_node, current_node, constraint_name)

                child_row = graph.row(child_node)
                self.fill_referencing_rows(graph, child_row)
                self.fill_referenced_rows(graph, child_row, expanding)
