"""Row graph storage and level assignment."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Set, Tuple

from rowpick.core.types import Row, TableIdentity

RowKey = Tuple[TableIdentity, str]
LeveledNodes = Dict[int, Set[int]]


@dataclass(frozen=True)
class Edge:
    """Child row -> parent row it references through ``constraint_name``."""

    child: int
    parent: int
    constraint_name: str


class RowGraph:
    """Directed graph of rows.

    Rows live in one list and nodes are their indices in it. Each distinct
    ``(table, id)`` gets exactly one node. Edges point from a child row to the
    parent row it references; several FKs between the same pair of rows give
    several edges.
    """

    def __init__(self):
        self.rows: List[Row] = []
        self.edges: List[Edge] = []
        self._index_by_key: Dict[RowKey, int] = {}
        self._edge_set: Set[Edge] = set()
        self._incoming: Dict[int, List[int]] = {}
        self._outgoing: Dict[int, List[int]] = {}

    def __len__(self) -> int:
        return len(self.rows)

    def __contains__(self, node: int) -> bool:
        return 0 <= node < len(self.rows)

    def add_node(self, row: Row) -> int:
        """Add a row, or return the existing node for the same ``(table, id)``."""
        index = self._index_by_key.get(row.key)
        if index is not None:
            return index

        index = len(self.rows)
        self.rows.append(row)
        self._index_by_key[row.key] = index
        self._incoming[index] = []
        self._outgoing[index] = []
        return index

    def add_edge(self, child: int, parent: int, constraint_name: str) -> bool:
        """Add a child -> parent edge.

        Returns:
            False if the same edge already existed
        """
        edge = Edge(child, parent, constraint_name)
        if edge in self._edge_set:
            return False

        self._edge_set.add(edge)
        self.edges.append(edge)
        self._outgoing[child].append(parent)
        self._incoming[parent].append(child)
        return True

    def node_of(self, row: Row) -> int:
        """Node index of a row already in the graph."""
        return self._index_by_key[row.key]

    def row(self, node: int) -> Row:
        return self.rows[node]

    def children(self, node: int) -> List[int]:
        """Nodes with an edge pointing at ``node``."""
        return self._incoming.get(node, [])

    def parents(self, node: int) -> List[int]:
        """Nodes ``node`` points at."""
        return self._outgoing.get(node, [])

    def rows_by_level(self, nodes_by_level: LeveledNodes) -> Dict[int, List[Row]]:
        """Resolve node indices of a level map into rows."""
        return {
            level: [self.rows[node] for node in sorted(nodes)]
            for level, nodes in nodes_by_level.items()
        }


def _neighbors(graph: RowGraph, node: int) -> Iterator[Tuple[int, int]]:
    for child in graph.children(node):
        yield child, 1
    for parent in graph.parents(node):
        yield parent, -1


def create_nodes_by_level(graph: RowGraph, root: int, level: int = 0) -> LeveledNodes:
    """Assign a signed level to every node reachable from ``root``.

    Depth-first from the root: children (incoming edges) go one level up,
    parents (outgoing edges) one level down. A node keeps the level at which
    it was first discovered, which is not necessarily its shortest distance
    from the root when several FK paths of different length join two rows.

    Args:
        graph: Row graph
        root: Node to start from
        level: Level of the root

    Returns:
        Dict mapping level -> set of node indices
    """
    nodes_by_level: LeveledNodes = {}

    if root not in graph:
        return nodes_by_level

    visited: Set[int] = {root}
    nodes_by_level.setdefault(level, set()).add(root)

    # Explicit stack so deep FK chains do not hit the recursion limit,
    # visiting neighbors in the same order a recursive walk would.
    stack = [(root, level, _neighbors(graph, root))]

    while stack:
        _, current_level, neighbors = stack[-1]

        for neighbor, delta in neighbors:
            if neighbor in visited:
                continue

            visited.add(neighbor)
            neighbor_level = current_level + delta
            nodes_by_level.setdefault(neighbor_level, set()).add(neighbor)
            stack.append((neighbor, neighbor_level, _neighbors(graph, neighbor)))
            break
        else:
            stack.pop()

    return nodes_by_level


def format_nodes_by_level(graph: RowGraph, nodes_by_level: LeveledNodes) -> str:
    """Render a level map for debug logging."""
    lines: List[str] = []
    for level in sorted(nodes_by_level):
        lines.append("-----------------")
        lines.append(str(level))
        lines.append("-----------------")
        for node in sorted(nodes_by_level[level]):
            lines.append(repr(graph.row(node)))
        lines.append("")
    return "\n".join(lines)
