"""Configuration loading from environment variables and a clusters file."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from kibanagraph.errors import ConfigError
from kibanagraph.models.config import (
    DEFAULT_INDEX,
    APIConfig,
    ClusterConfig,
    KibanaGraphConfig,
    LogConfig,
    StoreConfig,
)

_MAX_QUERY_SIZE = 10_000  # Elasticsearch's default index.max_result_window


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KIBANAGRAPH_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = _env(key, str(default))
    try:
        val = int(raw)
    except ValueError as exc:
        raise ConfigError(f"KIBANAGRAPH_{key} must be an integer, got {raw!r}") from exc
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_optional_int(key: str) -> int | None:
    if not _env(key):
        return None
    val = _env_int(key, 0)
    if val <= 0:
        raise ConfigError(f"KIBANAGRAPH_{key} must be positive, got {val}")
    return val


def _env_float(key: str, default: float) -> float:
    raw = _env(key, str(default))
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"KIBANAGRAPH_{key} must be a number, got {raw!r}") from exc


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ConfigError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_host(value: str) -> str:
    if not value.startswith(("http://", "https://")):
        raise ConfigError(f"Invalid store host {value!r}: must start with http:// or https://")
    return value.rstrip("/")


def _cluster_from_dict(raw: dict[str, Any]) -> ClusterConfig:
    try:
        name = str(raw["name"])
        host = str(raw["host"])
    except KeyError as exc:
        raise ConfigError(f"Cluster entry is missing required key {exc.args[0]!r}: {raw}") from exc

    max_age_ms = raw.get("max_age_ms")
    if max_age_ms is not None and (not isinstance(max_age_ms, int) or max_age_ms <= 0):
        raise ConfigError(f"Cluster {name!r}: max_age_ms must be a positive integer")
    timeout = raw.get("timeout_seconds")
    if timeout is not None and not isinstance(timeout, int | float):
        raise ConfigError(f"Cluster {name!r}: timeout_seconds must be a number")

    return ClusterConfig(
        name=name,
        host=_validate_host(host),
        index_name=str(raw.get("index_name") or DEFAULT_INDEX),
        max_age_ms=max_age_ms,
        timeout_seconds=float(timeout) if timeout is not None else None,
        headers={str(k): str(v) for k, v in (raw.get("headers") or {}).items()},
    )


def load_clusters(path: Path) -> list[ClusterConfig]:
    """Read cluster definitions from a JSON file of the form ``{"clusters": [...]}``."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read clusters file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Clusters file {path} is not valid JSON: {exc}") from exc

    entries = data.get("clusters") if isinstance(data, dict) else None
    if not isinstance(entries, list) or not entries:
        raise ConfigError(f"Clusters file {path} must contain a non-empty 'clusters' list")

    clusters = [_cluster_from_dict(entry) for entry in entries]
    names = [c.name for c in clusters]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigError(f"Duplicate cluster names in {path}: {', '.join(duplicates)}")
    return clusters


def load_config() -> KibanaGraphConfig:
    """Load configuration from KIBANAGRAPH_* environment variables.

    Without ``KIBANAGRAPH_CLUSTERS_FILE`` a single cluster named ``default``
    is built from ``KIBANAGRAPH_STORE_HOST`` and ``KIBANAGRAPH_STORE_INDEX``.
    """
    clusters_file = _env("CLUSTERS_FILE")
    if clusters_file:
        clusters = load_clusters(Path(clusters_file))
    else:
        clusters = [
            ClusterConfig(
                name="default",
                host=_validate_host(_env("STORE_HOST", "http://localhost:9200")),
                index_name=_env("STORE_INDEX", DEFAULT_INDEX),
            )
        ]

    return KibanaGraphConfig(
        store=StoreConfig(
            query_size_limit=_env_int("QUERY_SIZE_LIMIT", 1000, min_val=1, max_val=_MAX_QUERY_SIZE),
            max_age_ms=_env_optional_int("MAX_AGE_MS"),
            timeout_seconds=_env_float("STORE_TIMEOUT", 30.0),
        ),
        clusters=clusters,
        api=APIConfig(
            host=_env("API_HOST", "0.0.0.0"),
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
