"""Data structures for the saved object dependency graph."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any

from kibanagraph.models.objects import MISSING_NODE_ID, ObjectType


@dataclass(frozen=True)
class Node:
    """A saved object in the graph."""

    id: str
    type: ObjectType
    title: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "type": str(self.type), "title": self.title}


@dataclass(frozen=True)
class Edge:
    """A reference from ``source`` (the referencing object) to ``target``."""

    source: str
    target: str

    def to_dict(self) -> dict[str, str]:
        return {"source": self.source, "target": self.target}


@dataclass(frozen=True)
class Graph:
    """Immutable snapshot of all saved objects and their references.

    A new instance is produced on every refresh. Every edge source and,
    once built by GraphBuilder, every edge target names a node in ``nodes``.
    """

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    _by_id: dict[str, Node] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_id", {n.id: n for n in self.nodes})

    def node(self, node_id: str) -> Node | None:
        """Return the node with *node_id*, or None."""
        return self._by_id.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    @property
    def has_missing(self) -> bool:
        return MISSING_NODE_ID in self._by_id

    def dependencies(self, node_id: str) -> list[Node]:
        """Return every node reachable from *node_id* along edges.

        Breadth-first, in discovery order. The start node and the synthetic
        missing node are not included.
        """
        adjacency: dict[str, list[str]] = {}
        for edge in self.edges:
            adjacency.setdefault(edge.source, []).append(edge.target)

        seen = {node_id}
        result: list[Node] = []
        queue = deque([node_id])
        while queue:
            for target in adjacency.get(queue.popleft(), ()):
                if target in seen:
                    continue
                seen.add(target)
                queue.append(target)
                node = self._by_id.get(target)
                if node is not None and node.type != ObjectType.MISSING:
                    result.append(node)
        return result

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the ``{nodes, edges}`` rendering contract."""
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }
