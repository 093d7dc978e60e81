"""Typed schemas for reference metadata embedded as JSON strings in saved objects.

Kibana stores references inside string fields (``searchSourceJSON``,
``panelsJSON``). They are parsed here into pydantic models; any malformed
payload surfaces as ParseError naming the offending document and field.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from kibanagraph.errors import ParseError
from kibanagraph.models.objects import ObjectType


class SearchSourceReference(BaseModel):
    """The part of ``searchSourceJSON`` that points at an index pattern."""

    model_config = ConfigDict(extra="ignore")

    index: str | None = None


class PanelReference(BaseModel):
    """One entry of a dashboard's ``panelsJSON`` array."""

    model_config = ConfigDict(extra="ignore")

    type: str | None = None
    id: str | None = None


_PANELS = TypeAdapter(list[PanelReference])


def _payload(object_type: ObjectType, doc_id: str, source: dict[str, Any]) -> dict[str, Any]:
    payload = source.get(str(object_type))
    if not isinstance(payload, dict):
        raise ParseError(object_type, doc_id, str(object_type), "document has no payload for its type")
    return payload


def _search_source_json(object_type: ObjectType, doc_id: str, payload: dict[str, Any]) -> Any:
    meta = payload.get("kibanaSavedObjectMeta") or {}
    if not isinstance(meta, dict):
        raise ParseError(object_type, doc_id, "kibanaSavedObjectMeta", "expected an object")
    return meta.get("searchSourceJSON")


def _parse_search_source(object_type: ObjectType, doc_id: str, raw: Any) -> SearchSourceReference:
    field = "kibanaSavedObjectMeta.searchSourceJSON"
    if not isinstance(raw, str):
        raise ParseError(object_type, doc_id, field, f"expected a JSON string, got {type(raw).__name__}")
    try:
        return SearchSourceReference.model_validate_json(raw)
    except ValidationError as exc:
        raise ParseError(object_type, doc_id, field, str(exc)) from exc


def search_index_ref(doc_id: str, source: dict[str, Any]) -> str | None:
    """Return the index-pattern id a saved search queries.

    The ``searchSourceJSON`` field is mandatory on searches. None means it
    has no ``index`` key.
    """
    payload = _payload(ObjectType.SEARCH, doc_id, source)
    raw = _search_source_json(ObjectType.SEARCH, doc_id, payload)
    return _parse_search_source(ObjectType.SEARCH, doc_id, raw).index


def visualization_refs(doc_id: str, source: dict[str, Any]) -> tuple[str | None, str | None]:
    """Return ``(saved_search_id, index_pattern_id)`` of a visualization.

    Either or both may be None. Visualizations built on a saved search often
    carry no ``searchSourceJSON`` at all.
    """
    payload = _payload(ObjectType.VISUALIZATION, doc_id, source)
    saved_search_id = payload.get("savedSearchId") or None
    if saved_search_id is not None and not isinstance(saved_search_id, str):
        raise ParseError(ObjectType.VISUALIZATION, doc_id, "savedSearchId", "expected a string")

    raw = _search_source_json(ObjectType.VISUALIZATION, doc_id, payload)
    index = _parse_search_source(ObjectType.VISUALIZATION, doc_id, raw).index if raw else None
    return saved_search_id, index


def dashboard_panels(doc_id: str, source: dict[str, Any]) -> list[PanelReference]:
    """Return every panel of a dashboard; an empty or absent ``panelsJSON`` has none."""
    payload = _payload(ObjectType.DASHBOARD, doc_id, source)
    raw = payload.get("panelsJSON")
    if not raw:
        return []
    if not isinstance(raw, str):
        raise ParseError(ObjectType.DASHBOARD, doc_id, "panelsJSON", "expected a JSON string")
    try:
        return _PANELS.validate_json(raw)
    except ValidationError as exc:
        raise ParseError(ObjectType.DASHBOARD, doc_id, "panelsJSON", str(exc)) from exc
