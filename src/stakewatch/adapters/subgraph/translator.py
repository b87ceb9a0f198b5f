"""Translate subgraph payloads into domain types."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from stakewatch.domain.types import NetworkMetrics, RawEvent, RawEventBatch

if TYPE_CHECKING:
    from .schema import DelegationEventsData, GraphNetworkPayload, RawNumber, StakeEventPayload

log = getLogger(__name__)


def translate_event(payload: StakeEventPayload) -> RawEvent:
    return RawEvent(
        id=payload.id,
        delegator_address=payload.delegator,
        indexer_address=payload.indexer,
        amount=_raw_value(payload.tokens),
        timestamp_seconds=_raw_value(payload.timestamp_seconds),
        transaction_hash=payload.transaction_hash or None,
    )


def translate_events(data: DelegationEventsData) -> RawEventBatch:
    return RawEventBatch(
        deposits=tuple(translate_event(event) for event in data.deposits),
        withdrawals=tuple(translate_event(event) for event in data.withdrawals),
    )


def translate_metrics(payload: GraphNetworkPayload) -> NetworkMetrics:
    return NetworkMetrics(
        delegator_count=parse_count(payload.delegator_count, "delegatorCount"),
        active_delegator_count=parse_count(
            payload.active_delegator_count, "activeDelegatorCount"
        ),
        total_supply=parse_count(payload.total_supply, "totalSupply"),
        curator_count=parse_count(payload.curator_count, "curatorCount"),
    )


def parse_count(value: RawNumber, name: str) -> int | None:
    """Parse a decimal-string integer, returning ``None`` when absent or invalid."""

    if value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text.isdigit() or not text.isascii():
        log.warning("Ignoring unparsable metric %s=%r", name, value)
        return None
    return int(text)


def _raw_value(value: RawNumber) -> str | int:
    # Merge validation decides what is parsable; floats and nulls go through as text
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if value is None:
        return ""
    return str(value)
