"""Aggregate totals over a (filtered) activity sequence.

All sums are kept as integers in the token's smallest unit; conversion to whole
tokens happens once, when a caller asks for display values.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from .types import to_display_units

if TYPE_CHECKING:
    from collections.abc import Iterable
    from decimal import Decimal

    from .types import Activity

log = getLogger(__name__)

DEFAULT_TOP_INDEXERS = 10


@dataclass(frozen=True, slots=True)
class ActivityTotals:
    total_delegated: int = 0
    total_undelegated: int = 0

    @property
    def net_change(self) -> int:
        return self.total_delegated - self.total_undelegated

    @property
    def delegated_tokens(self) -> Decimal:
        return to_display_units(self.total_delegated)

    @property
    def undelegated_tokens(self) -> Decimal:
        return to_display_units(self.total_undelegated)

    @property
    def net_change_tokens(self) -> Decimal:
        return to_display_units(self.net_change)


@dataclass(frozen=True, slots=True)
class DailyActivity:
    date: str
    delegated: int
    undelegated: int

    @property
    def net(self) -> int:
        return self.delegated - self.undelegated


@dataclass(frozen=True, slots=True)
class IndexerNetChange:
    indexer_address: str
    label: str
    delegated: int
    undelegated: int

    @property
    def net(self) -> int:
        return self.delegated - self.undelegated


def aggregate(activities: Iterable[Activity]) -> ActivityTotals:
    delegated = 0
    undelegated = 0
    for activity in activities:
        if activity.is_delegation:
            delegated += _amount_or_zero(activity.staked_amount, activity.id)
        else:
            undelegated += _amount_or_zero(activity.unstaked_amount, activity.id)
    return ActivityTotals(total_delegated=delegated, total_undelegated=undelegated)


def daily_activity(activities: Iterable[Activity]) -> list[DailyActivity]:
    """Per-UTC-day delegated and undelegated sums, oldest day first."""

    buckets: dict[str, list[int]] = {}
    for activity in activities:
        day = datetime.fromtimestamp(activity.effective_timestamp, tz=UTC).date().isoformat()
        bucket = buckets.setdefault(day, [0, 0])
        amount = _amount_or_zero(activity.effective_amount, activity.id)
        bucket[0 if activity.is_delegation else 1] += amount
    return [
        DailyActivity(date=day, delegated=delegated, undelegated=undelegated)
        for day, (delegated, undelegated) in sorted(buckets.items())
    ]


def top_indexers_by_net_change(
    activities: Iterable[Activity],
    *,
    limit: int = DEFAULT_TOP_INDEXERS,
) -> list[IndexerNetChange]:
    """Indexers with the largest absolute net change, ties in first-seen order."""

    totals: dict[str, list[int]] = {}
    labels: dict[str, str] = {}
    for activity in activities:
        key = activity.indexer_address
        bucket = totals.setdefault(key, [0, 0])
        labels.setdefault(key, activity.indexer_name or shorten_address(key))
        amount = _amount_or_zero(activity.effective_amount, activity.id)
        bucket[0 if activity.is_delegation else 1] += amount

    ranked = sorted(
        (
            IndexerNetChange(
                indexer_address=address,
                label=labels[address],
                delegated=delegated,
                undelegated=undelegated,
            )
            for address, (delegated, undelegated) in totals.items()
        ),
        key=lambda change: abs(change.net),
        reverse=True,
    )
    return ranked[:limit]


def shorten_address(address: str) -> str:
    if len(address) <= 12:
        return address
    return f"{address[:6]}...{address[-4:]}"


def _amount_or_zero(amount: object, activity_id: str) -> int:
    if isinstance(amount, int) and not isinstance(amount, bool):
        return amount
    if isinstance(amount, str):
        text = amount.strip()
        if text.isdigit() and text.isascii():
            return int(text)
    log.warning("Ignoring non-numeric amount %r on activity %s", amount, activity_id)
    return 0
