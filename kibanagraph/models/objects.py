"""Saved object kinds stored in the Kibana index."""

from __future__ import annotations

from enum import StrEnum


class ObjectType(StrEnum):
    """Kinds of saved objects that can appear in the dependency graph."""

    INDEX_PATTERN = "index-pattern"
    SEARCH = "search"
    VISUALIZATION = "visualization"
    DASHBOARD = "dashboard"
    MISSING = "missing"  # synthetic target for dangling references


# Fetch order; node and edge lists are built type-major in this order.
QUERYABLE_TYPES: tuple[ObjectType, ...] = (
    ObjectType.INDEX_PATTERN,
    ObjectType.SEARCH,
    ObjectType.VISUALIZATION,
    ObjectType.DASHBOARD,
)

DASHBOARD_CHILD_TYPES: frozenset[ObjectType] = frozenset({ObjectType.VISUALIZATION, ObjectType.SEARCH})

EXPORTABLE_TYPES: frozenset[ObjectType] = frozenset(
    {ObjectType.SEARCH, ObjectType.VISUALIZATION, ObjectType.DASHBOARD}
)

ID_SEPARATOR = ":"

MISSING_NODE_ID = str(ObjectType.MISSING)
MISSING_NODE_TITLE = "Missing"


def node_id(object_type: ObjectType, raw_id: str) -> str:
    """Return the graph-wide id for a saved object.

    Kibana 6+ stores objects as ``<type>:<id>`` already; such ids are kept.
    """
    prefix = f"{object_type}{ID_SEPARATOR}"
    if raw_id.startswith(prefix):
        return raw_id
    return prefix + raw_id
