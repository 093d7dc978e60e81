"""Time-bounded, single-flight cache in front of GraphBuilder.

The cache owns exactly one slot. Its lifecycle:

    EMPTY ──get()──▶ PENDING ──success──▶ RESOLVED ──expired get()──▶ PENDING
                        │
                        └──failure──▶ EMPTY

While PENDING the slot holds the refresh task itself, so every ``get()``
arriving during a refresh awaits that same task instead of starting
another fetch. The slot is only ever replaced wholesale.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

import structlog

from kibanagraph.models.config import DEFAULT_MAX_AGE_MS
from kibanagraph.models.graph import Graph
from kibanagraph.observability.metrics import graph_cache_requests_total

_log = structlog.get_logger(component="cache.graph_cache")


class GraphSource(Protocol):
    async def fetch(self) -> Graph: ...


class CacheState(StrEnum):
    """Observable state of the cache slot."""

    EMPTY = "empty"
    PENDING = "pending"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class CacheEntry:
    """The cache slot: a resolved graph or the refresh computing one.

    ``timestamp`` is the clock reading taken when the fetch started.
    """

    timestamp: float
    value: Graph | asyncio.Task[Graph]


class GraphCache:
    """Serves the last built Graph until it is ``max_age_ms`` old.

    Args:
        source:     The GraphBuilder (anything with an async ``fetch()``).
        max_age_ms: Maximum staleness before a ``get()`` triggers a refresh.
        cluster:    Cluster name for logs and metric labels.
        clock:      Monotonic clock in seconds; injectable for tests.
    """

    def __init__(
        self,
        source: GraphSource,
        max_age_ms: int = DEFAULT_MAX_AGE_MS,
        cluster: str = "default",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._max_age = max_age_ms / 1000.0
        self._cluster = cluster
        self._clock = clock
        self._entry: CacheEntry | None = None

    @property
    def max_age_ms(self) -> int:
        return int(self._max_age * 1000)

    @property
    def state(self) -> CacheState:
        if self._entry is None:
            return CacheState.EMPTY
        if isinstance(self._entry.value, Graph):
            return CacheState.RESOLVED
        return CacheState.PENDING

    async def get(self) -> Graph:
        """Return a graph no older than ``max_age_ms``, refreshing at most once."""
        now = self._clock()
        entry = self._entry
        if entry is not None:
            if isinstance(entry.value, Graph):
                if now - entry.timestamp < self._max_age:
                    graph_cache_requests_total.labels(cluster=self._cluster, result="hit").inc()
                    return entry.value
            else:
                graph_cache_requests_total.labels(cluster=self._cluster, result="coalesced").inc()
                return await asyncio.shield(entry.value)

        graph_cache_requests_total.labels(cluster=self._cluster, result="refresh").inc()
        _log.debug("graph_cache_refresh", cluster=self._cluster, state=str(self.state))
        task = asyncio.ensure_future(self._source.fetch())
        task.add_done_callback(self._settle)
        self._entry = CacheEntry(timestamp=now, value=task)
        return await asyncio.shield(task)

    def invalidate(self) -> None:
        """Drop a resolved graph so the next ``get()`` refetches.

        An in-flight refresh is left alone; its waiters still receive it.
        """
        if self.state is CacheState.RESOLVED:
            self._entry = None

    def _settle(self, task: asyncio.Task[Graph]) -> None:
        entry = self._entry
        if entry is None or entry.value is not task:
            return
        if task.cancelled():
            self._entry = None
            _log.warning("graph_cache_refresh_cancelled", cluster=self._cluster)
            return
        exc = task.exception()
        if exc is not None:
            self._entry = None
            _log.warning("graph_cache_refresh_failed", cluster=self._cluster, error=str(exc))
            return
        self._entry = CacheEntry(timestamp=entry.timestamp, value=task.result())
