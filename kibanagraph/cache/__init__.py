"""Graph cache.

Submodules:
    graph_cache -- single-flight TTL cache wrapping GraphBuilder.
"""

from kibanagraph.cache.graph_cache import CacheEntry, CacheState, GraphCache

__all__ = ["CacheEntry", "CacheState", "GraphCache"]
