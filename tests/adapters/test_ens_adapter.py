from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import pytest

from stakewatch.adapters.ens import ENS_NAME_QUERY, EnsNameLookup, is_cacheable_payload
from stakewatch.config.subgraph import EnsConfig
from stakewatch.domain.errors import LookupFailure, TransportError
from stakewatch.domain.names import NameResolver
from tests.helpers.http import make_client_factory, plain_resilience, request_body

if TYPE_CHECKING:
    from collections.abc import Callable

    from stakewatch.adapters.http_resilience import ResilienceConfig, ResilientClient

URL = "https://ens.example/subgraph"
ADDRESS = "0xAbCdEf0000000000000000000000000000000001"


def _lookup(handler: Callable[[httpx.Request], httpx.Response]) -> EnsNameLookup:
    return EnsNameLookup(
        EnsConfig(url=URL, resilience=plain_resilience("ens")),
        client_factory=make_client_factory(handler),
    )


def _domains(*names: str | None) -> httpx.Response:
    return httpx.Response(200, json={"data": {"domains": [{"name": name} for name in names]}})


def test_lookup_returns_first_name_and_sends_lowercase_address() -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(request_body(request))
        return _domains("alice.eth")

    async def run() -> str | None:
        async with _lookup(handler) as lookup:
            return await lookup(ADDRESS)

    assert asyncio.run(run()) == "alice.eth"
    assert bodies[0]["query"] == ENS_NAME_QUERY
    assert bodies[0]["variables"] == {"address": ADDRESS.lower()}


def test_lookup_without_domains_returns_none() -> None:
    async def run() -> str | None:
        async with _lookup(lambda request: _domains()) as lookup:
            return await lookup(ADDRESS)

    assert asyncio.run(run()) is None


def test_lookup_skips_blank_names() -> None:
    async def run() -> str | None:
        async with _lookup(lambda request: _domains(None, "  ", "bob.eth")) as lookup:
            return await lookup(ADDRESS)

    assert asyncio.run(run()) == "bob.eth"


def test_lookup_raises_lookup_failure_on_malformed_payload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"domains": "nope"}})

    async def run() -> str | None:
        async with _lookup(handler) as lookup:
            return await lookup(ADDRESS)

    with pytest.raises(LookupFailure):
        asyncio.run(run())


def test_lookup_transport_failure_propagates() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    async def run() -> str | None:
        async with _lookup(handler) as lookup:
            return await lookup(ADDRESS)

    with pytest.raises(TransportError):
        asyncio.run(run())


def test_resolver_over_ens_lookup_caches_failures() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500)

    async def run() -> list[str | None]:
        async with _lookup(handler) as lookup:
            resolver = NameResolver(lookup)
            return [await resolver.resolve(ADDRESS), await resolver.resolve(ADDRESS.lower())]

    assert asyncio.run(run()) == [None, None]
    assert len(calls) == 1


def test_lookup_reuses_one_client_until_closed() -> None:
    created: list[ResilientClient] = []
    base_factory = make_client_factory(lambda request: _domains("alice.eth"))

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = base_factory(resilience)
        created.append(client)
        return client

    lookup = EnsNameLookup(
        EnsConfig(url=URL, resilience=plain_resilience("ens")),
        client_factory=factory,
    )

    async def run() -> None:
        async with lookup:
            await lookup(ADDRESS)
            await lookup(ADDRESS)

    asyncio.run(run())

    assert len(created) == 1


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"data": {"domains": []}}, True),
        ({"data": None, "errors": [{"message": "x"}]}, False),
        ({"errors": []}, False),
        ([], False),
    ],
)
def test_is_cacheable_payload(payload: object, *, expected: bool) -> None:
    assert is_cacheable_payload(payload) is expected
