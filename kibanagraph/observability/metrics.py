"""Prometheus metrics."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

graph_fetch_total = Counter(
    "kibanagraph_graph_fetch_total",
    "Graph fetches against the store, by outcome.",
    ["cluster", "outcome"],
)

graph_fetch_duration_seconds = Histogram(
    "kibanagraph_graph_fetch_duration_seconds",
    "Wall time of a full graph fetch.",
    ["cluster"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

graph_nodes = Gauge(
    "kibanagraph_graph_nodes",
    "Nodes in the most recently built graph.",
    ["cluster"],
)

graph_missing_edges = Gauge(
    "kibanagraph_graph_missing_edges",
    "Edges rewired to the missing node in the most recently built graph.",
    ["cluster"],
)

graph_cache_requests_total = Counter(
    "kibanagraph_graph_cache_requests_total",
    "GraphCache.get() calls by result (hit, coalesced, refresh).",
    ["cluster", "result"],
)

export_total = Counter(
    "kibanagraph_export_total",
    "Export requests by outcome.",
    ["cluster", "outcome"],
)
