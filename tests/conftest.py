"""Shared fixtures and document factories for kibanagraph tests.

Provides an in-memory FakeStore standing in for the Kibana index, with call
counters so tests can assert how often the store was actually queried.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterator
from typing import Any

import pytest
import structlog
from structlog.testing import capture_logs

from kibanagraph.models.objects import ObjectType
from kibanagraph.models.store import RawDoc, RawSearchResult

# ---------------------------------------------------------------------------
# Document factories
# ---------------------------------------------------------------------------


def _meta(search_source: dict[str, Any] | str | None) -> dict[str, Any]:
    if search_source is None:
        return {}
    raw = search_source if isinstance(search_source, str) else json.dumps(search_source)
    return {"kibanaSavedObjectMeta": {"searchSourceJSON": raw}}


def make_index_pattern(raw_id: str = "ip1", title: str = "logs-*") -> RawDoc:
    """Create an index-pattern document with a Kibana 6 style id."""
    return RawDoc(
        id=f"index-pattern:{raw_id}",
        source={
            "type": "index-pattern",
            "index-pattern": {"title": title, "timeFieldName": "@timestamp"},
        },
    )


def make_search(
    raw_id: str = "s1",
    title: str = "Errors",
    index: str | None = "ip1",
    search_source: dict[str, Any] | str | None = None,
) -> RawDoc:
    """Create a saved search referencing index pattern *index*."""
    if search_source is None:
        search_source = {"index": index, "query": {"query": "level:error", "language": "kuery"}}
        if index is None:
            del search_source["index"]
    return RawDoc(
        id=f"search:{raw_id}",
        source={
            "type": "search",
            "search": {"title": title, "columns": ["message"], **_meta(search_source)},
        },
    )


def make_visualization(
    raw_id: str = "v1",
    title: str = "Error rate",
    saved_search_id: str | None = None,
    index: str | None = None,
    search_source: dict[str, Any] | str | None = None,
) -> RawDoc:
    """Create a visualization built on a saved search and/or an index pattern."""
    if search_source is None and index is not None:
        search_source = {"index": index, "filter": []}
    payload: dict[str, Any] = {
        "title": title,
        "visState": json.dumps({"type": "line"}),
        **_meta(search_source),
    }
    if saved_search_id is not None:
        payload["savedSearchId"] = saved_search_id
    return RawDoc(id=f"visualization:{raw_id}", source={"type": "visualization", "visualization": payload})


def make_dashboard(
    raw_id: str = "d1",
    title: str = "Overview",
    panels: list[dict[str, Any]] | str | None = None,
) -> RawDoc:
    """Create a dashboard; *panels* is a list of ``{type, id}`` or a raw panelsJSON string."""
    payload: dict[str, Any] = {"title": title}
    if panels is not None:
        payload["panelsJSON"] = panels if isinstance(panels, str) else json.dumps(panels)
    return RawDoc(id=f"dashboard:{raw_id}", source={"type": "dashboard", "dashboard": payload})


def scenario_docs() -> list[RawDoc]:
    """ip1 <- s1 <- v1 <- d1: one object of each type, no dangling reference."""
    return [
        make_index_pattern("ip1"),
        make_search("s1", index="ip1"),
        make_visualization("v1", saved_search_id="s1"),
        make_dashboard("d1", panels=[{"type": "visualization", "id": "v1", "panelIndex": "1"}]),
    ]


# ---------------------------------------------------------------------------
# Fake store
# ---------------------------------------------------------------------------


class FakeStore:
    """In-memory stand-in for StoreClient.

    Args:
        docs:     Documents in the index.
        delay:    Seconds each query sleeps, to keep refreshes in flight.
        fail:     Exception raised by every query while set.
        totals:   Per-type total hit counts overriding the real count.
    """

    def __init__(
        self,
        docs: list[RawDoc] | None = None,
        delay: float = 0.0,
        fail: Exception | None = None,
        totals: dict[ObjectType, int] | None = None,
    ) -> None:
        self.docs = list(docs or [])
        self.delay = delay
        self.fail = fail
        self.totals = totals or {}
        self.query_calls = 0
        self.bulk_get_calls = 0
        self.closed = False

    @property
    def fetches(self) -> int:
        """Number of full graph fetches (four type queries each)."""
        return self.query_calls // 4

    async def query_by_type(self, object_type: ObjectType, size_limit: int) -> RawSearchResult:
        self.query_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail is not None:
            raise self.fail
        hits = [d for d in self.docs if d.source.get("type") == str(object_type)]
        total = self.totals.get(object_type, len(hits))
        return RawSearchResult(total=total, hits=hits[:size_limit])

    async def bulk_get(self, ids: list[str]) -> list[RawDoc]:
        self.bulk_get_calls += 1
        by_id = {d.id: d for d in self.docs}
        return [by_id.get(i, RawDoc(id=i, source={}, found=False)) for i in ids]

    async def aclose(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _quiet_logging() -> Iterator[None]:
    """Drop everything below CRITICAL and never cache loggers."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def log_events() -> Iterator[list[dict[str, Any]]]:
    """Capture structlog events at every level for the duration of a test."""
    previous = structlog.get_config()
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG))
    try:
        with capture_logs() as events:
            yield events
    finally:
        structlog.configure(**previous)


@pytest.fixture
def fake_store() -> FakeStore:
    """A FakeStore holding the four-object scenario."""
    return FakeStore(scenario_docs())


class FakeClock:
    """Manually advanced monotonic clock, in seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
