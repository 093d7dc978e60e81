"""``kibanagraph`` command line.

Commands print JSON to stdout; logs go to stderr.
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import click

from kibanagraph.clusters import ClusterObjects, ClusterRegistry
from kibanagraph.config import load_config
from kibanagraph.errors import KibanaGraphError
from kibanagraph.graph.builder import summarize
from kibanagraph.observability.logging import setup_logging

T = TypeVar("T")


def _run(cluster_name: str | None, action: Callable[[ClusterObjects], Awaitable[T]]) -> T:
    try:
        config = load_config()
    except KibanaGraphError as exc:
        raise click.ClickException(str(exc)) from exc

    async def _go() -> T:
        registry = ClusterRegistry.from_config(config)
        try:
            cluster = registry.get(cluster_name) if cluster_name else registry.default()
            return await action(cluster)
        finally:
            await registry.aclose()

    try:
        return asyncio.run(_go())
    except KibanaGraphError as exc:
        raise click.ClickException(str(exc)) from exc


def _dump(data: Any) -> None:
    json.dump(data, sys.stdout, indent=2)
    sys.stdout.write("\n")


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="warning",
    show_default=True,
)
def cli(log_level: str) -> None:
    """Explore dependencies between Kibana saved objects."""
    setup_logging(log_level, fmt="console")


@cli.command()
def serve() -> None:
    """Run the REST API."""
    from kibanagraph.app import main

    asyncio.run(main())


@cli.command()
@click.option("--cluster", "cluster_name", default=None, help="Cluster name (default: first configured).")
@click.option("--summary", is_flag=True, help="Print per-type counts instead of the graph.")
def graph(cluster_name: str | None, summary: bool) -> None:
    """Print the dependency graph as JSON."""

    async def action(cluster: ClusterObjects) -> dict[str, Any]:
        result = await cluster.graph()
        return summarize(result) if summary else result.to_dict()

    _dump(_run(cluster_name, action))


@cli.command()
@click.argument("ids", nargs=-1, required=True)
@click.option("--cluster", "cluster_name", default=None, help="Cluster name (default: first configured).")
@click.option("--with-dependencies", is_flag=True, help="Also export the searches and visualizations used.")
def export(ids: tuple[str, ...], cluster_name: str | None, with_dependencies: bool) -> None:
    """Export saved objects (ids of the form <type>:<id>) as JSON."""

    async def action(cluster: ClusterObjects) -> list[dict[str, Any]]:
        records = await cluster.export(list(ids), with_dependencies=with_dependencies)
        return [r.to_dict() for r in records]

    _dump(_run(cluster_name, action))
