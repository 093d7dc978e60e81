"""Re-shapes stored saved objects into portable export records."""

from __future__ import annotations

from typing import Protocol

import structlog

from kibanagraph.errors import MalformedId, ObjectsNotFound, ParseError, UnsupportedExportType
from kibanagraph.models.objects import EXPORTABLE_TYPES, ID_SEPARATOR, ObjectType
from kibanagraph.models.store import ExportRecord, RawDoc

_log = structlog.get_logger(component="export.exporter")


class BulkStore(Protocol):
    async def bulk_get(self, ids: list[str]) -> list[RawDoc]: ...


def to_export_record(doc: RawDoc) -> ExportRecord:
    """Split ``<type>:<id>`` and lift the type-namespaced payload."""
    raw_type = doc.source.get("type")
    try:
        object_type = ObjectType(raw_type)
    except ValueError:
        raise UnsupportedExportType(doc.id, str(raw_type)) from None
    if object_type not in EXPORTABLE_TYPES:
        raise UnsupportedExportType(doc.id, object_type)

    parts = doc.id.split(ID_SEPARATOR)
    if len(parts) != 2:
        raise MalformedId(doc.id)
    _, raw_id = parts

    payload = doc.source.get(str(object_type))
    if not isinstance(payload, dict):
        raise ParseError(object_type, doc.id, str(object_type), "document has no payload for its type")
    return ExportRecord(id=raw_id, type=object_type, source=payload)


class Exporter:
    """Bulk-fetches saved objects and converts them for export."""

    def __init__(self, store: BulkStore) -> None:
        self._store = store

    async def export(self, ids: list[str]) -> list[ExportRecord]:
        """Export *ids* in request order; all or nothing.

        Raises ObjectsNotFound listing every id the store does not have.
        """
        docs = await self._store.bulk_get(list(ids))
        missing = [d.id for d in docs if not d.found]
        if missing:
            _log.warning("export_objects_not_found", missing=missing, requested=len(ids))
            raise ObjectsNotFound(missing)

        records = [to_export_record(d) for d in docs]
        _log.info("export_completed", objects=len(records))
        return records
