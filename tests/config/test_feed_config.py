from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest

from stakewatch.config import (
    FeedHorizon,
    InvalidConfigurationError,
    MissingConfigurationError,
    get_ens_config,
    get_feed_config,
    get_storage_config,
    get_subgraph_config,
)
from stakewatch.config.feed import DEFAULT_LOOKUP_CONCURRENCY, DEFAULT_LOOKUP_TIMEOUT_SECONDS


def test_feed_config_defaults() -> None:
    config = get_feed_config()

    assert config.horizon is FeedHorizon.RECENT
    assert config.event_cap == 100
    assert config.page_size == 50
    assert config.lookup_concurrency == DEFAULT_LOOKUP_CONCURRENCY
    assert config.lookup_timeout_seconds == DEFAULT_LOOKUP_TIMEOUT_SECONDS


def test_feed_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STAKEWATCH_FEED_HORIZON", "Extended")
    monkeypatch.setenv("STAKEWATCH_LOOKUP_CONCURRENCY", "4")
    monkeypatch.setenv("STAKEWATCH_LOOKUP_TIMEOUT_SECONDS", "2.5")

    config = get_feed_config()

    assert config.horizon is FeedHorizon.EXTENDED
    assert config.event_cap == 1000
    assert config.lookup_concurrency == 4
    assert config.lookup_timeout_seconds == 2.5


def test_feed_config_rejects_unknown_horizon(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STAKEWATCH_FEED_HORIZON", "forever")

    with pytest.raises(InvalidConfigurationError, match="recent or extended"):
        get_feed_config()


def test_subgraph_config_requires_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STAKEWATCH_GRAPH_API", raising=False)

    with pytest.raises(MissingConfigurationError, match="STAKEWATCH_GRAPH_API"):
        get_subgraph_config()


def test_subgraph_config_has_no_response_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STAKEWATCH_GRAPH_API", "https://graph.example/network")

    config = get_subgraph_config()

    assert config.url == "https://graph.example/network"
    assert config.resilience.cache is None
    assert "POST" in config.resilience.retry.allowed_methods


def test_ens_config_uses_memory_cache_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STAKEWATCH_ENS_API", "https://ens.example/subgraph")

    config = get_ens_config()

    assert config.resilience.cache is not None
    assert config.resilience.cache.backend == "memory"
    assert config.resilience.cache.sqlite_path is None
    assert config.resilience.ratelimit is not None


def test_ens_config_persistent_cache_lives_in_data_dir(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setenv("STAKEWATCH_ENS_API", "https://ens.example/subgraph")
    monkeypatch.setenv("STAKEWATCH_DATA_DIR", str(tmp_path / "data"))

    config = get_ens_config(persistent_cache=True)

    assert config.resilience.cache is not None
    assert config.resilience.cache.backend == "sqlite"
    expected = (tmp_path / "data" / "http_cache.db").resolve()
    assert config.resilience.cache.sqlite_path == str(expected)
    assert expected.parent.exists()


def test_storage_config_prefers_explicit_env(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("STAKEWATCH_DATA_DIR", str(custom))

    config = get_storage_config()

    assert config.resolve_data_dir() == custom.resolve()
    assert config.http_cache_path(ensure=False) == custom.resolve() / "http_cache.db"
    assert not custom.exists()
