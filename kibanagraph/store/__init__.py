"""Document store access."""

from kibanagraph.store.client import StoreClient

__all__ = ["StoreClient"]
