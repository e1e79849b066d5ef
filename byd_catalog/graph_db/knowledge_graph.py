"""Adjacency-list knowledge graph over brand, series, model and tech nodes.

The graph is a derived view of the catalog tables. It does not police
duplicates or dangling targets itself; `CatalogStore` keeps it in lockstep
with the tables.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from byd_catalog.utils.logging import get_logger

logger = get_logger(__name__)

BRAND_NODE_ID = 0


class NodeKind(str, Enum):
    BRAND = "brand"
    SERIES = "series"
    MODEL = "model"
    TECH = "tech"


class EdgeKind(str, Enum):
    HAS_SERIES = "has_series"  # brand -> series
    BELONGS_TO = "belongs_to"  # model -> series
    USES_TECH = "uses_tech"  # model -> tech


@dataclass(frozen=True, slots=True)
class GraphNode:
    id: int
    kind: NodeKind
    label: str


@dataclass(frozen=True, slots=True)
class Edge:
    source: int
    target: int
    kind: EdgeKind


class KnowledgeGraph:
    """Directed multigraph keyed by integer node id.

    Outgoing edges live in the source node's adjacency list, so neighbor
    queries cost O(out-degree). An incoming-edge index answers reverse
    lookups such as "models of a series" in O(in-degree).
    """

    def __init__(self) -> None:
        self._nodes: dict[int, GraphNode] = {}
        self._adjacency: dict[int, list[Edge]] = {}
        self._incoming: dict[int, list[Edge]] = {}
        self._edge_count = 0

    # -- mutation ------------------------------------------------------

    def add_node(self, node_id: int, kind: NodeKind, label: str) -> GraphNode:
        node = GraphNode(node_id, kind, label)
        if node_id in self._nodes:
            logger.warning("graph_node_replaced", node_id=node_id, kind=kind.value)
        self._nodes[node_id] = node
        self._adjacency.setdefault(node_id, [])
        return node

    def add_edge(self, source: int, target: int, kind: EdgeKind) -> bool:
        """Append an edge to `source`'s adjacency list.

        Returns False without changing anything when `source` is not a node.
        """
        if source not in self._nodes:
            logger.warning(
                "graph_edge_source_missing", source=source, target=target, kind=kind.value
            )
            return False
        edge = Edge(source, target, kind)
        self._adjacency[source].append(edge)
        self._incoming.setdefault(target, []).append(edge)
        self._edge_count += 1
        return True

    def clear(self) -> None:
        self._nodes.clear()
        self._adjacency.clear()
        self._incoming.clear()
        self._edge_count = 0

    # -- lookup --------------------------------------------------------

    def has_node(self, node_id: int) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: int) -> GraphNode | None:
        return self._nodes.get(node_id)

    def nodes(self) -> Iterator[GraphNode]:
        return iter(self._nodes.values())

    def edges(self) -> Iterator[Edge]:
        for adjacency in self._adjacency.values():
            yield from adjacency

    def out_edges(self, node_id: int) -> list[Edge]:
        return list(self._adjacency.get(node_id, ()))

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return self._edge_count

    def neighbors(self, node_id: int) -> list[int]:
        """Targets of every outgoing edge, in insertion order."""
        return [edge.target for edge in self._adjacency.get(node_id, ())]

    def neighbors_by_type(self, node_id: int, kind: EdgeKind) -> list[int]:
        return [edge.target for edge in self._adjacency.get(node_id, ()) if edge.kind is kind]

    def predecessors_by_type(self, node_id: int, kind: EdgeKind) -> list[int]:
        return [edge.source for edge in self._incoming.get(node_id, ()) if edge.kind is kind]

    # -- traversal -----------------------------------------------------

    def traverse_breadth_first(self, start_id: int) -> list[int]:
        """Node ids reachable from `start_id` in FIFO discovery order."""
        if start_id not in self._nodes:
            return []
        order: list[int] = []
        visited = {start_id}
        queue = deque([start_id])
        while queue:
            current = queue.popleft()
            order.append(current)
            for neighbor in self.neighbors(current):
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)
        return order

    def traverse_depth_first(self, start_id: int) -> list[int]:
        """Pre-order DFS using an explicit stack.

        Produces the same order as the recursive formulation: neighbors are
        pushed in reverse so the first neighbor is expanded first.
        """
        if start_id not in self._nodes:
            return []
        order: list[int] = []
        visited: set[int] = set()
        stack = [start_id]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            order.append(current)
            for neighbor in reversed(self.neighbors(current)):
                if neighbor not in visited:
                    stack.append(neighbor)
        return order
