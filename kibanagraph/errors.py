"""Error taxonomy.

Every error carries enough context (type, id, or count) to be diagnosed
without re-querying the store. None of them are retried internally.
"""

from __future__ import annotations

from collections.abc import Sequence


class KibanaGraphError(Exception):
    """Base class for all kibanagraph errors."""


class ConfigError(KibanaGraphError, ValueError):
    """Raised when configuration cannot be loaded or is invalid."""


class StoreUnavailable(KibanaGraphError):
    """Transport or connection failure talking to the document store."""

    def __init__(self, operation: str, host: str, cause: Exception | str) -> None:
        super().__init__(f"Store {operation} against {host} failed: {cause}")
        self.operation = operation
        self.host = host
        self.cause = cause


class ResultTruncated(KibanaGraphError):
    """A type query matched more documents than one page can hold."""

    def __init__(self, object_type: str, total: int, size_limit: int) -> None:
        super().__init__(
            f"Didn't fetch all {object_type} objects: total={total} exceeds query size limit {size_limit}"
        )
        self.object_type = object_type
        self.total = total
        self.size_limit = size_limit


class ParseError(KibanaGraphError):
    """Embedded reference metadata of a saved object is malformed."""

    def __init__(self, object_type: str, doc_id: str, field: str, reason: str) -> None:
        super().__init__(f"Cannot parse {field} of {object_type} {doc_id!r}: {reason}")
        self.object_type = object_type
        self.doc_id = doc_id
        self.field = field
        self.reason = reason


class ObjectsNotFound(KibanaGraphError):
    """Some objects requested for export do not exist."""

    def __init__(self, missing_ids: Sequence[str]) -> None:
        self.missing_ids = list(missing_ids)
        super().__init__(f"Some objects couldn't be found: {', '.join(self.missing_ids)}")


class MalformedId(KibanaGraphError):
    """A stored object id is not of the form ``<type>:<id>``."""

    def __init__(self, doc_id: str) -> None:
        super().__init__(f"Unsupported object id {doc_id!r}: expected '<type>:<id>'")
        self.doc_id = doc_id


class UnsupportedExportType(KibanaGraphError):
    """Export was requested for an object type that cannot be exported."""

    def __init__(self, doc_id: str, object_type: str) -> None:
        super().__init__(f"Object {doc_id!r} has non-exportable type {object_type!r}")
        self.doc_id = doc_id
        self.object_type = object_type


class UnknownCluster(KibanaGraphError):
    """No cluster with the requested name is configured."""

    def __init__(self, cluster: str) -> None:
        super().__init__(f"Unknown cluster: {cluster}")
        self.cluster = cluster


class DuplicateNodeId(KibanaGraphError):
    """Two stored objects map to the same graph node id.

    Happens when one document is stored as ``<type>:<id>`` and another as the
    bare ``<id>`` of the same type.
    """

    def __init__(self, node_id: str, raw_ids: Sequence[str]) -> None:
        self.node_id = node_id
        self.raw_ids = list(raw_ids)
        super().__init__(f"Objects {', '.join(map(repr, self.raw_ids))} share graph node id {node_id!r}")
