"""Raw documents as returned by the document store, and export records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kibanagraph.models.objects import ObjectType


@dataclass(frozen=True)
class RawDoc:
    """A document from the Kibana index.

    ``source`` is the stored body: a ``type`` key plus a payload keyed by
    that type, e.g. ``{"type": "search", "search": {"title": ...}}``.
    """

    id: str
    source: dict[str, Any] = field(default_factory=dict)
    found: bool = True


@dataclass(frozen=True)
class RawSearchResult:
    """One page of a type-filtered search."""

    total: int
    hits: list[RawDoc] = field(default_factory=list)


@dataclass(frozen=True)
class ExportRecord:
    """A saved object re-shaped for import into another Kibana."""

    id: str
    type: ObjectType
    source: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": str(self.type), "source": self.source}
