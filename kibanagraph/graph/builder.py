"""Builds the saved object dependency graph from the Kibana index.

The builder holds no state: every ``fetch()`` queries the four real object
types concurrently, maps hits to nodes, derives edges from each type's
embedded reference metadata and rewires dangling edges to a single
synthetic ``missing`` node. A reference that names no target at all
(a search without an index, a panel without an id) points there directly.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import Any, Protocol, assert_never

import structlog

from kibanagraph.errors import DuplicateNodeId, ResultTruncated
from kibanagraph.graph import references
from kibanagraph.models.graph import Edge, Graph, Node
from kibanagraph.models.objects import (
    DASHBOARD_CHILD_TYPES,
    MISSING_NODE_ID,
    MISSING_NODE_TITLE,
    QUERYABLE_TYPES,
    ObjectType,
    node_id,
)
from kibanagraph.models.store import RawDoc, RawSearchResult
from kibanagraph.observability.metrics import (
    graph_fetch_duration_seconds,
    graph_fetch_total,
    graph_missing_edges,
    graph_nodes,
)

_log = structlog.get_logger(component="graph.builder")


class ObjectStore(Protocol):
    """What the builder needs from a store client."""

    async def query_by_type(self, object_type: ObjectType, size_limit: int) -> RawSearchResult: ...


def map_type(object_type: ObjectType, result: RawSearchResult, size_limit: int) -> list[Node]:
    """Map one type's search result to nodes.

    Raises ResultTruncated when the page did not hold every match; a partial
    node set would silently corrupt the graph.
    """
    if result.total > size_limit:
        raise ResultTruncated(object_type, result.total, size_limit)
    return [_to_node(object_type, hit) for hit in result.hits]


def _to_node(object_type: ObjectType, hit: RawDoc) -> Node:
    payload = hit.source.get(str(object_type))
    title = payload.get("title") if isinstance(payload, dict) else None
    return Node(id=node_id(object_type, hit.id), type=object_type, title=str(title or ""))


def extract_edges(object_type: ObjectType, hits: Sequence[RawDoc]) -> list[Edge]:
    """Derive the outgoing references of every hit of *object_type*."""
    edges: list[Edge] = []
    for hit in hits:
        edges.extend(_edges_of(object_type, hit))
    return edges


def _edges_of(object_type: ObjectType, hit: RawDoc) -> list[Edge]:
    source_id = node_id(object_type, hit.id)
    match object_type:
        case ObjectType.SEARCH:
            index = references.search_index_ref(hit.id, hit.source)
            if index is None:
                return [Edge(source_id, MISSING_NODE_ID)]
            return [Edge(source_id, node_id(ObjectType.INDEX_PATTERN, index))]
        case ObjectType.VISUALIZATION:
            saved_search_id, index = references.visualization_refs(hit.id, hit.source)
            edges = []
            if saved_search_id is not None:
                edges.append(Edge(source_id, node_id(ObjectType.SEARCH, saved_search_id)))
            if index is not None:
                edges.append(Edge(source_id, node_id(ObjectType.INDEX_PATTERN, index)))
            return edges
        case ObjectType.DASHBOARD:
            edges = []
            for panel in references.dashboard_panels(hit.id, hit.source):
                if panel.type not in DASHBOARD_CHILD_TYPES:
                    continue
                if not panel.id:
                    edges.append(Edge(source_id, MISSING_NODE_ID))
                    continue
                edges.append(Edge(source_id, node_id(ObjectType(panel.type), panel.id)))
            return edges
        case ObjectType.INDEX_PATTERN | ObjectType.MISSING:
            return []
        case _:
            assert_never(object_type)


def reconcile_missing(nodes: list[Node], edges: list[Edge]) -> tuple[list[Node], list[Edge]]:
    """Point every dangling edge at one synthetic ``missing`` node.

    At most one missing node is added no matter how many edges dangle.
    Inputs are returned unchanged when nothing dangles.
    """
    known = {n.id for n in nodes}
    if all(e.target in known for e in edges):
        return nodes, edges
    missing = Node(id=MISSING_NODE_ID, type=ObjectType.MISSING, title=MISSING_NODE_TITLE)
    rewired = [e if e.target in known else Edge(e.source, MISSING_NODE_ID) for e in edges]
    return [*nodes, missing], rewired


class GraphBuilder:
    """Fetches every saved object of one cluster and builds a Graph.

    Args:
        store:      Anything with an async ``query_by_type`` (normally StoreClient).
        size_limit: Page size for each type query; more matches is an error.
        cluster:    Cluster name, used for logs and metric labels.
    """

    def __init__(self, store: ObjectStore, size_limit: int, cluster: str = "default") -> None:
        self._store = store
        self._size_limit = size_limit
        self._cluster = cluster

    async def fetch(self) -> Graph:
        log = _log.bind(cluster=self._cluster)
        log.info("graph_fetch_started", size_limit=self._size_limit)
        t_start = time.monotonic()
        try:
            results = await asyncio.gather(
                *(self._store.query_by_type(t, self._size_limit) for t in QUERYABLE_TYPES)
            )
            graph = self._build(dict(zip(QUERYABLE_TYPES, results, strict=True)))
        except Exception as exc:
            graph_fetch_total.labels(cluster=self._cluster, outcome="failure").inc()
            log.error("graph_fetch_failed", error=str(exc), error_type=type(exc).__name__)
            raise

        duration = time.monotonic() - t_start
        missing_edges = sum(1 for e in graph.edges if e.target == MISSING_NODE_ID)
        graph_fetch_total.labels(cluster=self._cluster, outcome="success").inc()
        graph_fetch_duration_seconds.labels(cluster=self._cluster).observe(duration)
        graph_nodes.labels(cluster=self._cluster).set(len(graph.nodes))
        graph_missing_edges.labels(cluster=self._cluster).set(missing_edges)
        log.info(
            "graph_fetch_completed",
            nodes=len(graph.nodes),
            edges=len(graph.edges),
            missing_edges=missing_edges,
            duration_ms=round(duration * 1000.0, 1),
        )
        return graph

    def _build(self, results: dict[ObjectType, RawSearchResult]) -> Graph:
        nodes: list[Node] = []
        raw_ids: dict[str, str] = {}
        for object_type, result in results.items():
            for node, hit in zip(map_type(object_type, result, self._size_limit), result.hits, strict=True):
                if node.id in raw_ids:
                    raise DuplicateNodeId(node.id, [raw_ids[node.id], hit.id])
                raw_ids[node.id] = hit.id
                nodes.append(node)

        edges: list[Edge] = []
        for object_type, result in results.items():
            edges.extend(extract_edges(object_type, result.hits))

        nodes, edges = reconcile_missing(nodes, edges)
        return Graph(nodes=tuple(nodes), edges=tuple(edges))


def summarize(graph: Graph) -> dict[str, Any]:
    """Per-type node counts, handy for logs and the CLI."""
    counts: dict[str, Any] = {str(t): 0 for t in ObjectType}
    for node in graph.nodes:
        counts[str(node.type)] += 1
    counts["edges"] = len(graph.edges)
    return counts
