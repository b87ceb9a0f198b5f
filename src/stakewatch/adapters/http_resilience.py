"""Async HTTP client for GraphQL endpoints with retries, rate limiting and caching."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import RetryTransport

from stakewatch.config.http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    ShouldCacheHook,
)
from stakewatch.config.storage import get_storage_config

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import HeaderTypes, RequestExtensions, TimeoutTypes, URLTypes

__all__ = [
    "CacheConfig",
    "RateLimit",
    "RequestOptions",
    "ResilienceConfig",
    "ResilientClient",
    "RetryPolicy",
]

log = getLogger(__name__)


class RequestOptions(TypedDict, total=False):
    json: object
    headers: HeaderTypes | None
    timeout: TimeoutTypes | UseClientDefault
    extensions: RequestExtensions | None


class ResilientClient:
    """One upstream endpoint: retrying transport, optional limiter and response cache.

    Use as an async context manager; closing it also closes the cache storage.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter = _build_limiter(config.ratelimit)
        self._client = _build_http_client(config)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        if self._limiter is None:
            return await self._client.request(method, url, **kwargs)
        async with self._limiter:
            return await self._client.request(method, url, **kwargs)

    async def post(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("POST", url, **kwargs)


def _build_limiter(ratelimit: RateLimit | None) -> AsyncLimiter | None:
    if ratelimit is None:
        return None
    return AsyncLimiter(ratelimit.max_calls, ratelimit.per_seconds)


def _build_http_client(config: ResilienceConfig) -> httpx.AsyncClient:
    transport = RetryTransport(retry=config.retry.build())
    headers = dict(config.default_headers) if config.default_headers else None

    storage, policy = _build_cache_components(config.cache)
    if storage is None:
        return httpx.AsyncClient(
            timeout=config.timeout_seconds,
            headers=headers,
            transport=transport,
        )
    log.debug("HTTP cache enabled for %s", config.name)
    return AsyncCacheClient(
        timeout=config.timeout_seconds,
        headers=headers,
        transport=transport,
        storage=storage,
        policy=policy,
    )


class _ShouldCacheResponseFilter(BaseFilter[HishelCacheResponse]):
    """Hishel response filter that hands the decoded JSON body to a predicate."""

    def __init__(self, predicate: ShouldCacheHook) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if body is None:
            return False
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return False
        return bool(self._predicate(payload))


def _build_cache_components(
    config: CacheConfig | None,
) -> tuple[AsyncSqliteStorage | None, FilterPolicy | None]:
    if config is None or not config.enabled:
        return None, None

    if config.backend == "sqlite":
        database_path = config.sqlite_path or str(get_storage_config().http_cache_path())
    elif config.backend == "memory":
        database_path = ":memory:"
    else:
        msg = f"Unsupported cache backend: {config.backend}"
        raise ValueError(msg)

    storage = AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.default_ttl_seconds,
        refresh_ttl_on_access=config.refresh_ttl_on_access,
    )
    # hishel only stores POST answers through a filter policy
    filters = [_ShouldCacheResponseFilter(config.should_cache)] if config.should_cache else []
    return storage, FilterPolicy(response_filters=filters)
