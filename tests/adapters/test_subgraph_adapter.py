from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import pytest

from stakewatch.adapters.subgraph import SubgraphClient
from stakewatch.adapters.subgraph.client import DELEGATION_EVENTS_QUERY, NETWORK_METRICS_QUERY
from stakewatch.adapters.subgraph.schema import StakeEventPayload
from stakewatch.adapters.subgraph.translator import parse_count, translate_event
from stakewatch.config.subgraph import SubgraphConfig
from stakewatch.domain.errors import MalformedResponseError, TransportError
from stakewatch.domain.merge import merge_events
from stakewatch.domain.types import RawEvent
from tests.helpers.http import make_client_factory, plain_resilience, request_body

if TYPE_CHECKING:
    from collections.abc import Callable

URL = "https://graph.example/network"


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> SubgraphClient:
    return SubgraphClient(
        config=SubgraphConfig(url=URL, resilience=plain_resilience("graph-network")),
        client_factory=make_client_factory(handler),
    )


def _event(event_id: str, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": event_id,
        "delegator": "0xAAA1",
        "indexer": "0xBBB2",
        "tokens": "1000000000000000000",
        "timestampSeconds": "1704628800",
        "transactionHash": "0xtx",
    }
    payload.update(overrides)
    return payload


def test_fetch_events_translates_both_streams() -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(request_body(request))
        return httpx.Response(
            200,
            json={
                "data": {
                    "deposits": [_event("dep-1"), _event("dep-2", tokens="5")],
                    "withdrawals": [_event("wd-1", timestampSeconds="1704628900")],
                }
            },
        )

    batch = asyncio.run(_client(handler).fetch_events(first=100))

    assert bodies[0]["query"] == DELEGATION_EVENTS_QUERY
    assert bodies[0]["variables"] == {"first": 100}
    assert [event.id for event in batch.deposits] == ["dep-1", "dep-2"]
    assert [event.id for event in batch.withdrawals] == ["wd-1"]
    assert batch.deposits[0] == RawEvent(
        id="dep-1",
        delegator_address="0xAAA1",
        indexer_address="0xBBB2",
        amount="1000000000000000000",
        timestamp_seconds="1704628800",
        transaction_hash="0xtx",
    )


def test_fetch_events_accepts_account_objects() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "data": {
                    "deposits": [_event("dep-1", delegator={"id": "0xd"}, indexer={"id": "0xi"})],
                    "withdrawals": [],
                }
            },
        )

    batch = asyncio.run(_client(handler).fetch_events(first=10))

    assert batch.deposits[0].delegator_address == "0xd"
    assert batch.deposits[0].indexer_address == "0xi"


def test_fetch_events_requires_both_streams() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"deposits": []}})

    with pytest.raises(MalformedResponseError):
        asyncio.run(_client(handler).fetch_events(first=10))


def test_fetch_events_surfaces_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    with pytest.raises(TransportError) as exc:
        asyncio.run(_client(handler).fetch_events(first=10))

    assert exc.value.source == "event source"


def test_unparsable_payload_values_are_dropped_by_merge() -> None:
    payload = StakeEventPayload.model_validate(_event("dep-1", tokens=None, timestampSeconds=1.5))

    event = translate_event(payload)
    result = merge_events([event], [], cap=10)

    assert event.amount == ""
    assert result.activities == []
    assert result.dropped[0].field == "amount"


def test_numeric_json_values_pass_through() -> None:
    payload = StakeEventPayload.model_validate(_event("dep-1", tokens=42, timestampSeconds=1700))

    event = translate_event(payload)

    assert event.amount == 42
    assert event.timestamp_seconds == 1700


def test_fetch_metrics_parses_counts() -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(request_body(request))
        return httpx.Response(
            200,
            json={
                "data": {
                    "graphNetwork": {
                        "delegatorCount": "15000",
                        "activeDelegatorCount": "9000",
                        "totalSupply": "10800000000000000000000000000",
                        "curatorCount": "oops",
                    }
                }
            },
        )

    metrics = asyncio.run(_client(handler).fetch_metrics())

    assert bodies[0]["query"] == NETWORK_METRICS_QUERY
    assert metrics.delegator_count == 15000
    assert metrics.active_delegator_count == 9000
    assert metrics.total_supply == 10_800_000_000 * 10**18
    assert metrics.curator_count is None
    assert metrics.available


def test_fetch_metrics_requires_graph_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"graphNetwork": None}})

    with pytest.raises(MalformedResponseError):
        asyncio.run(_client(handler).fetch_metrics())


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        ("12", 12),
        (7, 7),
        (" 3 ", 3),
        ("-1", None),
        ("1e3", None),
        (2.5, None),
        ("²", None),
        ("١٢", None),
    ],
)
def test_parse_count(value: object, expected: int | None) -> None:
    assert parse_count(value, "delegatorCount") == expected  # type: ignore[arg-type]
