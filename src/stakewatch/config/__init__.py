"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_float, optional_env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .feed import FeedConfig, FeedHorizon, get_feed_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import StorageConfig, get_storage_config
from .subgraph import EnsConfig, SubgraphConfig, get_ens_config, get_subgraph_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "EnsConfig",
    "FeedConfig",
    "FeedHorizon",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SubgraphConfig",
    "configure_logging",
    "get_ens_config",
    "get_feed_config",
    "get_storage_config",
    "get_subgraph_config",
    "optional_env_float",
    "optional_env_int",
    "optional_env_var",
    "require_env_vars",
]
