"""FastAPI application factory for kibanagraph.

Usage::

    from kibanagraph.api.app import create_app

    app = create_app(registry=registry, config=config)

The factory is used by both ``kibanagraph serve`` and the tests.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from kibanagraph.api.routes import router
from kibanagraph.api.schemas import ErrorResponse
from kibanagraph.clusters import ClusterRegistry
from kibanagraph.errors import (
    DuplicateNodeId,
    KibanaGraphError,
    MalformedId,
    ObjectsNotFound,
    ParseError,
    ResultTruncated,
    StoreUnavailable,
    UnknownCluster,
    UnsupportedExportType,
)

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api/v1"

# error class -> (HTTP status, error code)
_ERROR_STATUS: dict[type[KibanaGraphError], tuple[int, str]] = {
    UnknownCluster: (404, "UNKNOWN_CLUSTER"),
    ObjectsNotFound: (404, "OBJECTS_NOT_FOUND"),
    UnsupportedExportType: (422, "UNSUPPORTED_EXPORT_TYPE"),
    MalformedId: (422, "MALFORMED_ID"),
    ResultTruncated: (502, "RESULT_TRUNCATED"),
    ParseError: (502, "PARSE_ERROR"),
    DuplicateNodeId: (502, "DUPLICATE_NODE_ID"),
    StoreUnavailable: (503, "STORE_UNAVAILABLE"),
}


def _error_response(status: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status, content=ErrorResponse(error=error, detail=detail).model_dump())


def create_app(registry: ClusterRegistry, config: Any = None) -> FastAPI:
    """Create and configure the kibanagraph FastAPI application.

    Args:
        registry: ClusterRegistry serving graphs and exports per cluster.
        config:   KibanaGraphConfig, kept on app.state for handlers.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from kibanagraph import __version__

    app = FastAPI(
        title="kibanagraph",
        summary="Dependency graph of Kibana saved objects",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    app.state.registry = registry
    app.state.config = config

    app.include_router(router, prefix=_API_PREFIX)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = exc.errors()
        first_msg = str(errors[0].get("msg", "")) if errors else ""
        return _error_response(400, "INVALID_REQUEST", first_msg)

    @app.exception_handler(KibanaGraphError)
    async def domain_exception_handler(request: Request, exc: KibanaGraphError) -> JSONResponse:
        status, code = _ERROR_STATUS.get(type(exc), (500, "INTERNAL_ERROR"))
        _log.warning("request_failed", path=str(request.url.path), error=code, detail=str(exc))
        return _error_response(status, code, str(exc))

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred.")

    return app
