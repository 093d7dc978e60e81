"""Application bootstrap for kibanagraph.

Startup order: config → logging → cluster registry (store clients) → REST.
Shutdown runs in reverse once uvicorn exits on SIGINT/SIGTERM: the REST
server stops accepting requests, then every store client's connection pool
is closed.
"""

from __future__ import annotations

from kibanagraph.clusters import ClusterRegistry
from kibanagraph.config import load_config
from kibanagraph.models.config import KibanaGraphConfig
from kibanagraph.observability.logging import get_logger, setup_logging


class KibanaGraphApp:
    """Owns the cluster registry for the lifetime of the uvicorn server."""

    def __init__(self, config: KibanaGraphConfig | None = None) -> None:
        self.config = config
        self.registry: ClusterRegistry | None = None
        self._log = get_logger("app")

    async def run(self) -> None:
        """Serve until uvicorn is asked to exit, then shut down cleanly."""
        import uvicorn  # type: ignore[import-untyped]

        from kibanagraph import __version__
        from kibanagraph.api.app import create_app

        if self.config is None:
            self.config = load_config()
        setup_logging(self.config.log.level)
        self._log.info(
            "kibanagraph starting",
            version=__version__,
            clusters=[c.name for c in self.config.clusters],
        )

        self.registry = ClusterRegistry.from_config(self.config)
        app = create_app(registry=self.registry, config=self.config)
        server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=self.config.api.host,
                port=self.config.api.port,
                log_config=None,
                access_log=False,
            )
        )

        self._log.info("kibanagraph started", host=self.config.api.host, port=self.config.api.port)
        try:
            await server.serve()
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Close every store client. Safe to call more than once."""
        if self.registry is None:
            return
        registry, self.registry = self.registry, None
        await registry.aclose()
        self._log.info("kibanagraph stopped")


async def main() -> None:
    await KibanaGraphApp().run()
