"""Per-cluster wiring of store client, graph builder, cache and exporter."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from kibanagraph.cache.graph_cache import GraphCache
from kibanagraph.errors import UnknownCluster
from kibanagraph.export.exporter import Exporter
from kibanagraph.graph.builder import GraphBuilder
from kibanagraph.models.config import ClusterConfig, KibanaGraphConfig, StoreConfig
from kibanagraph.models.graph import Graph
from kibanagraph.models.objects import EXPORTABLE_TYPES
from kibanagraph.models.store import ExportRecord
from kibanagraph.observability.metrics import export_total
from kibanagraph.store.client import StoreClient

_log = structlog.get_logger(component="clusters")


class ClusterObjects:
    """Graph and export access to the saved objects of one cluster."""

    def __init__(self, cluster: ClusterConfig, store_config: StoreConfig, store: StoreClient | None = None) -> None:
        self.name = cluster.name
        self.config = cluster
        self.store = store or StoreClient(
            host=cluster.host,
            index_name=cluster.index_name,
            timeout=cluster.resolve_timeout(store_config),
            headers=cluster.headers,
        )
        self.builder = GraphBuilder(self.store, store_config.query_size_limit, cluster=cluster.name)
        self.cache = GraphCache(self.builder, cluster.resolve_max_age_ms(store_config), cluster=cluster.name)
        self.exporter = Exporter(self.store)

    async def graph(self) -> Graph:
        return await self.cache.get()

    async def export(self, ids: list[str], with_dependencies: bool = False) -> list[ExportRecord]:
        """Export *ids*, optionally followed by everything they depend on.

        Dependencies come from the cached graph. Only exportable types are
        added, so index patterns a dashboard ultimately uses are left out.
        """
        if with_dependencies:
            ids = await self._with_dependencies(ids)
        try:
            records = await self.exporter.export(ids)
        except Exception:
            export_total.labels(cluster=self.name, outcome="failure").inc()
            raise
        export_total.labels(cluster=self.name, outcome="success").inc()
        return records

    async def _with_dependencies(self, ids: list[str]) -> list[str]:
        graph = await self.graph()
        expanded = list(dict.fromkeys(ids))
        for requested in ids:
            for dep in graph.dependencies(requested):
                if dep.type in EXPORTABLE_TYPES and dep.id not in expanded:
                    expanded.append(dep.id)
        _log.debug("export_dependencies_expanded", cluster=self.name, requested=len(ids), expanded=len(expanded))
        return expanded

    async def aclose(self) -> None:
        await self.store.aclose()


class ClusterRegistry:
    """All configured clusters, by name."""

    def __init__(self, clusters: Iterable[ClusterObjects]) -> None:
        self._clusters = {c.name: c for c in clusters}

    @classmethod
    def from_config(cls, config: KibanaGraphConfig) -> ClusterRegistry:
        return cls(ClusterObjects(c, config.store) for c in config.clusters)

    def names(self) -> list[str]:
        return list(self._clusters)

    def get(self, name: str) -> ClusterObjects:
        try:
            return self._clusters[name]
        except KeyError:
            raise UnknownCluster(name) from None

    def default(self) -> ClusterObjects:
        """The first configured cluster."""
        if not self._clusters:
            raise UnknownCluster("<none configured>")
        return next(iter(self._clusters.values()))

    async def aclose(self) -> None:
        for cluster in self._clusters.values():
            try:
                await cluster.aclose()
            except Exception as exc:
                _log.error("cluster_close_failed", cluster=cluster.name, error=str(exc))
