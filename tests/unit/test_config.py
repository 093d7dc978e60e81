"""Unit tests for environment and clusters-file configuration loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from kibanagraph.config import load_clusters, load_config
from kibanagraph.errors import ConfigError
from kibanagraph.models.config import DEFAULT_MAX_AGE_MS, ClusterConfig, StoreConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    import os

    for key in list(os.environ):
        if key.startswith("KIBANAGRAPH_"):
            monkeypatch.delenv(key)


def _write_clusters(tmp_path: Path, clusters: object) -> Path:
    path = tmp_path / "clusters.json"
    path.write_text(json.dumps({"clusters": clusters}), encoding="utf-8")
    return path


class TestDefaults:
    def test_defaults_without_environment(self) -> None:
        config = load_config()
        assert config.store.query_size_limit == 1000
        assert config.store.max_age_ms is None
        assert [c.name for c in config.clusters] == ["default"]
        assert config.clusters[0].host == "http://localhost:9200"
        assert config.clusters[0].index_name == ".kibana"
        assert config.log.level == "info"

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KIBANAGRAPH_QUERY_SIZE_LIMIT", "250")
        monkeypatch.setenv("KIBANAGRAPH_MAX_AGE_MS", "30000")
        monkeypatch.setenv("KIBANAGRAPH_STORE_HOST", "https://es.internal:9243/")
        monkeypatch.setenv("KIBANAGRAPH_STORE_INDEX", ".kibana_7")
        monkeypatch.setenv("KIBANAGRAPH_LOG_LEVEL", "DEBUG")
        config = load_config()
        assert config.store.query_size_limit == 250
        assert config.store.max_age_ms == 30_000
        assert config.clusters[0].host == "https://es.internal:9243"
        assert config.clusters[0].index_name == ".kibana_7"
        assert config.log.level == "debug"

    def test_query_size_limit_is_clamped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KIBANAGRAPH_QUERY_SIZE_LIMIT", "50000")
        assert load_config().store.query_size_limit == 10_000

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("QUERY_SIZE_LIMIT", "lots"),
            ("MAX_AGE_MS", "-5"),
            ("STORE_HOST", "es:9200"),
            ("LOG_LEVEL", "verbose"),
            ("STORE_TIMEOUT", "soon"),
        ],
    )
    def test_invalid_values_raise_config_error(self, monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
        monkeypatch.setenv(f"KIBANAGRAPH_{key}", value)
        with pytest.raises(ConfigError):
            load_config()


class TestClustersFile:
    def test_loads_clusters_with_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write_clusters(
            tmp_path,
            [
                {"name": "prod", "host": "https://prod:9200", "max_age_ms": 60000, "headers": {"X-Team": "obs"}},
                {"name": "staging", "host": "http://staging:9200", "index_name": ".kibana_staging"},
            ],
        )
        monkeypatch.setenv("KIBANAGRAPH_CLUSTERS_FILE", str(path))
        config = load_config()
        prod, staging = config.clusters
        assert prod.max_age_ms == 60_000
        assert prod.index_name == ".kibana"
        assert prod.headers == {"X-Team": "obs"}
        assert staging.index_name == ".kibana_staging"
        assert staging.max_age_ms is None

    def test_missing_host_is_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="host"):
            load_clusters(_write_clusters(tmp_path, [{"name": "prod"}]))

    def test_duplicate_names_are_rejected(self, tmp_path: Path) -> None:
        path = _write_clusters(tmp_path, [{"name": "a", "host": "http://x"}, {"name": "a", "host": "http://y"}])
        with pytest.raises(ConfigError, match="Duplicate"):
            load_clusters(path)

    def test_empty_cluster_list_is_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_clusters(_write_clusters(tmp_path, []))

    def test_unreadable_file_is_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_clusters(tmp_path / "nope.json")

    def test_invalid_json_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "clusters.json"
        path.write_text("{clusters: []", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_clusters(path)


class TestMaxAgeResolution:
    def test_cluster_override_wins(self) -> None:
        cluster = ClusterConfig(name="a", host="http://x", max_age_ms=1000)
        assert cluster.resolve_max_age_ms(StoreConfig(max_age_ms=2000)) == 1000

    def test_global_default_used_without_override(self) -> None:
        cluster = ClusterConfig(name="a", host="http://x")
        assert cluster.resolve_max_age_ms(StoreConfig(max_age_ms=2000)) == 2000

    def test_builtin_default_is_five_minutes(self) -> None:
        cluster = ClusterConfig(name="a", host="http://x")
        assert cluster.resolve_max_age_ms(StoreConfig()) == DEFAULT_MAX_AGE_MS == 300_000

    def test_timeout_resolution(self) -> None:
        store = StoreConfig(timeout_seconds=12.0)
        assert ClusterConfig(name="a", host="http://x").resolve_timeout(store) == 12.0
        assert ClusterConfig(name="a", host="http://x", timeout_seconds=3.0).resolve_timeout(store) == 3.0
