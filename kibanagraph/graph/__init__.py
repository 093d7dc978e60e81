"""Saved object dependency graph.

Built from the references Kibana embeds in each object: searches point at
index patterns, visualizations at searches and index patterns, dashboards
at their visualization and search panels.
"""

from kibanagraph.graph.builder import GraphBuilder, extract_edges, map_type, reconcile_missing

__all__ = [
    "GraphBuilder",
    "extract_edges",
    "map_type",
    "reconcile_missing",
]
