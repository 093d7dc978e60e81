"""REST API layer for kibanagraph.

Exposes:
    create_app -- FastAPI application factory.
"""

from kibanagraph.api.app import create_app

__all__ = ["create_app"]
