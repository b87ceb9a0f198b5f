"""Upstream subgraph endpoints and their HTTP resilience settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy, ShouldCacheHook
from .storage import get_storage_config

GRAPH_TIMEOUT_SECONDS = 20.0
ENS_TIMEOUT_SECONDS = 10.0
ENS_CACHE_TTL_SECONDS = 3600.0

_JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


@dataclass(frozen=True, slots=True)
class SubgraphConfig:
    """Network subgraph serving delegation events and network metrics."""

    url: str
    resilience: ResilienceConfig


@dataclass(frozen=True, slots=True)
class EnsConfig:
    """ENS subgraph used for reverse name lookups."""

    url: str
    resilience: ResilienceConfig


def get_subgraph_config(*, resilience: ResilienceConfig | None = None) -> SubgraphConfig:
    values = require_env_vars(("STAKEWATCH_GRAPH_API",))
    url = values["STAKEWATCH_GRAPH_API"]
    return SubgraphConfig(
        url=url,
        resilience=resilience
        or ResilienceConfig(
            name="graph-network",
            timeout_seconds=GRAPH_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=2),
            default_headers=_JSON_HEADERS,
        ),
    )


def get_ens_config(
    *,
    resilience: ResilienceConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
    persistent_cache: bool = False,
) -> EnsConfig:
    values = require_env_vars(("STAKEWATCH_ENS_API",))
    sqlite_path = str(get_storage_config().http_cache_path()) if persistent_cache else None
    return EnsConfig(
        url=values["STAKEWATCH_ENS_API"],
        resilience=resilience
        or ResilienceConfig(
            name="ens",
            timeout_seconds=ENS_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=1),
            ratelimit=RateLimit(max_calls=20, per_seconds=1.0),
            cache=CacheConfig(
                backend="sqlite" if persistent_cache else "memory",
                sqlite_path=sqlite_path,
                default_ttl_seconds=ENS_CACHE_TTL_SECONDS,
                should_cache=cache_predicate,
            ),
            default_headers=_JSON_HEADERS,
        ),
    )
