"""Route handlers mounted under /api/v1."""

from __future__ import annotations

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from kibanagraph.api.schemas import ExportRequest, ExportResponse, GraphResponse, HealthResponse
from kibanagraph.clusters import ClusterRegistry

router = APIRouter()


def _registry(request: Request) -> ClusterRegistry:
    return request.app.state.registry  # type: ignore[no-any-return]


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    from kibanagraph import __version__

    return HealthResponse(version=__version__, clusters=_registry(request).names())


@router.get("/clusters")
async def list_clusters(request: Request) -> dict[str, list[str]]:
    return {"clusters": _registry(request).names()}


@router.get("/clusters/{name}/graph", response_model=GraphResponse)
async def cluster_graph(name: str, request: Request) -> dict[str, object]:
    graph = await _registry(request).get(name).graph()
    return graph.to_dict()


@router.post("/clusters/{name}/export", response_model=ExportResponse)
async def cluster_export(name: str, body: ExportRequest, request: Request) -> dict[str, object]:
    cluster = _registry(request).get(name)
    records = await cluster.export(body.ids, with_dependencies=body.with_dependencies)
    return {"objects": [r.to_dict() for r in records]}


@router.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
