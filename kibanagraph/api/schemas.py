"""Request/response models for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error envelope returned for every non-2xx response."""

    error: str
    detail: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    clusters: list[str]


class NodeOut(BaseModel):
    id: str
    type: str
    title: str


class EdgeOut(BaseModel):
    source: str
    target: str


class GraphResponse(BaseModel):
    """The node/edge contract consumed by the rendering front end."""

    nodes: list[NodeOut]
    edges: list[EdgeOut]


class ExportRequest(BaseModel):
    ids: list[str] = Field(min_length=1, max_length=10_000)
    with_dependencies: bool = False


class ExportRecordOut(BaseModel):
    id: str
    type: str
    source: dict[str, object]


class ExportResponse(BaseModel):
    objects: list[ExportRecordOut]
