"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_MAX_AGE_MS = 5 * 60 * 1000
DEFAULT_INDEX = ".kibana"


@dataclass
class StoreConfig:
    """Global defaults shared by every cluster."""

    query_size_limit: int = 1000
    max_age_ms: int | None = None
    timeout_seconds: float = 30.0


@dataclass
class ClusterConfig:
    """A source cluster. Values set here win over StoreConfig."""

    name: str
    host: str
    index_name: str = DEFAULT_INDEX
    max_age_ms: int | None = None
    timeout_seconds: float | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def resolve_max_age_ms(self, store: StoreConfig) -> int:
        """Cluster override, else global default, else five minutes."""
        if self.max_age_ms is not None:
            return self.max_age_ms
        if store.max_age_ms is not None:
            return store.max_age_ms
        return DEFAULT_MAX_AGE_MS

    def resolve_timeout(self, store: StoreConfig) -> float:
        if self.timeout_seconds is not None:
            return self.timeout_seconds
        return store.timeout_seconds


@dataclass
class APIConfig:
    """REST API configuration."""

    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class KibanaGraphConfig:
    """Top-level configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    clusters: list[ClusterConfig] = field(default_factory=list)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
