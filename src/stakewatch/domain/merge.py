"""Reconcile deposit and withdrawal events into a single activity feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import ParseError
from .types import Activity, EventOrigin

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .types import RawEvent

log = getLogger(__name__)


@dataclass(slots=True)
class MergeResult:
    """Merged activities plus diagnostics for the events that were dropped."""

    activities: list[Activity]
    dropped: list[ParseError] = field(default_factory=list[ParseError])

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)


def merge_events(
    deposits: Iterable[RawEvent],
    withdrawals: Iterable[RawEvent],
    *,
    cap: int,
) -> MergeResult:
    """Merge both event streams, newest first, keeping at most ``cap`` records.

    Events with an unparsable amount or timestamp are dropped and reported in
    ``MergeResult.dropped``. Records sharing a timestamp keep their input order,
    deposits before withdrawals.
    """

    if cap < 0:
        raise ValueError("Merge cap must be non-negative")

    activities: list[Activity] = []
    dropped: list[ParseError] = []
    for origin, events in ((EventOrigin.DEPOSIT, deposits), (EventOrigin.WITHDRAWAL, withdrawals)):
        for event in events:
            try:
                activities.append(to_activity(event, origin))
            except ParseError as exc:
                log.warning("Dropping %s event: %s", origin, exc)
                dropped.append(exc)

    activities.sort(key=lambda activity: activity.effective_timestamp, reverse=True)
    if len(activities) > cap:
        log.debug("Truncating merged feed from %s to %s records", len(activities), cap)
        del activities[cap:]
    return MergeResult(activities=activities, dropped=dropped)


def to_activity(event: RawEvent, origin: EventOrigin) -> Activity:
    """Build the activity record for one raw event, raising ``ParseError`` if invalid."""

    delegator = event.delegator_address.strip()
    if not delegator:
        raise ParseError(event.id, "delegator", event.delegator_address)
    indexer = event.indexer_address.strip()
    if not indexer:
        raise ParseError(event.id, "indexer", event.indexer_address)

    amount = _parse_non_negative_int(event.amount)
    if amount is None:
        raise ParseError(event.id, "amount", event.amount)
    timestamp = _parse_non_negative_int(event.timestamp_seconds)
    if timestamp is None or timestamp == 0:
        raise ParseError(event.id, "timestamp", event.timestamp_seconds)

    if origin is EventOrigin.DEPOSIT:
        return Activity(
            id=event.id,
            delegator_address=delegator,
            indexer_address=indexer,
            staked_amount=amount,
            delegated_at=timestamp,
            transaction_hash=event.transaction_hash or None,
        )
    return Activity(
        id=event.id,
        delegator_address=delegator,
        indexer_address=indexer,
        unstaked_amount=amount,
        undelegated_at=timestamp,
        transaction_hash=event.transaction_hash or None,
    )


def _parse_non_negative_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str):
        text = value.strip()
        if not text.isdigit() or not text.isascii():
            return None
        return int(text)
    return None
