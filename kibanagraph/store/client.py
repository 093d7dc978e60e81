"""Thin async client for the Kibana index in Elasticsearch.

Issues type-filtered searches and multi-gets over the REST API. No business
logic lives here; every transport or HTTP failure becomes StoreUnavailable.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from kibanagraph.errors import StoreUnavailable
from kibanagraph.models.objects import ObjectType
from kibanagraph.models.store import RawDoc, RawSearchResult

_log = structlog.get_logger(component="store.client")


def _total_hits(hits: dict[str, Any]) -> int:
    # ES < 7 returns an int, ES >= 7 returns {"value": n, "relation": "eq"}.
    total = hits.get("total", 0)
    if isinstance(total, dict):
        return int(total.get("value", 0))
    return int(total)


class StoreClient:
    """Reads saved objects from one cluster's Kibana index.

    Args:
        host:       Base URL of the cluster, e.g. ``http://es:9200``.
        index_name: Kibana index, ``.kibana`` unless overridden.
        timeout:    Per-request timeout in seconds.
        headers:    Extra headers sent with every request.
        transport:  Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        host: str,
        index_name: str = ".kibana",
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._host = host.rstrip("/")
        self._index = index_name
        self._client = httpx.AsyncClient(
            base_url=self._host,
            timeout=timeout,
            headers={"Content-Type": "application/json", **(headers or {})},
            transport=transport,
        )

    @property
    def host(self) -> str:
        return self._host

    @property
    def index_name(self) -> str:
        return self._index

    async def query_by_type(self, object_type: ObjectType, size_limit: int) -> RawSearchResult:
        """Return up to *size_limit* documents of *object_type* and the total hit count."""
        body = {
            "query": {"term": {"type": str(object_type)}},
            "size": size_limit,
            "track_total_hits": True,
        }
        data = await self._post("search", f"/{self._index}/_search", body)
        hits = data.get("hits", {})
        docs = [RawDoc(id=h["_id"], source=h.get("_source", {})) for h in hits.get("hits", [])]
        _log.debug("store_query_completed", type=str(object_type), returned=len(docs), host=self._host)
        return RawSearchResult(total=_total_hits(hits), hits=docs)

    async def bulk_get(self, ids: list[str]) -> list[RawDoc]:
        """Fetch documents by id; each result carries a ``found`` flag."""
        if not ids:
            return []
        data = await self._post("mget", f"/{self._index}/_mget", {"ids": ids})
        return [
            RawDoc(id=d["_id"], source=d.get("_source", {}), found=d.get("found") is True)
            for d in data.get("docs", [])
        ]

    async def _post(self, operation: str, path: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._client.post(path, json=body)
            response.raise_for_status()
            return response.json()  # type: ignore[no-any-return]
        except httpx.HTTPStatusError as exc:
            _log.warning(
                "store_non_2xx_response",
                operation=operation,
                status_code=exc.response.status_code,
                body=exc.response.text[:200],
                host=self._host,
            )
            raise StoreUnavailable(operation, self._host, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            _log.warning("store_transport_error", operation=operation, error=str(exc), host=self._host)
            raise StoreUnavailable(operation, self._host, exc) from exc
        except ValueError as exc:
            raise StoreUnavailable(operation, self._host, f"invalid JSON response: {exc}") from exc

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> StoreClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
