"""Core data structures for kibanagraph."""

from kibanagraph.models.config import ClusterConfig, KibanaGraphConfig, StoreConfig
from kibanagraph.models.graph import Edge, Graph, Node
from kibanagraph.models.objects import (
    DASHBOARD_CHILD_TYPES,
    EXPORTABLE_TYPES,
    QUERYABLE_TYPES,
    ObjectType,
    node_id,
)
from kibanagraph.models.store import ExportRecord, RawDoc, RawSearchResult

__all__ = [
    "DASHBOARD_CHILD_TYPES",
    "EXPORTABLE_TYPES",
    "QUERYABLE_TYPES",
    "ClusterConfig",
    "Edge",
    "ExportRecord",
    "Graph",
    "KibanaGraphConfig",
    "Node",
    "ObjectType",
    "RawDoc",
    "RawSearchResult",
    "StoreConfig",
    "node_id",
]
