"""Filtering and sorting of the activity feed."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING

from .time_windows import WindowPreset, utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .time_windows import Clock, TimeWindow
    from .types import Activity


class SortKey(StrEnum):
    TYPE = "Type"
    DELEGATOR = "Delegator"
    INDEXER = "Indexer"
    AMOUNT = "Amount"
    UPDATED = "Updated"


class SortDirection(StrEnum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    def flipped(self) -> SortDirection:
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING


def _type_key(activity: Activity) -> str:
    return activity.kind.value


def _delegator_key(activity: Activity) -> str:
    return activity.delegator_address


def _indexer_key(activity: Activity) -> str:
    return activity.indexer_address


def _amount_key(activity: Activity) -> int:
    return activity.effective_amount


def _updated_key(activity: Activity) -> int:
    return activity.effective_timestamp


SORT_KEY_FUNCTIONS: dict[SortKey, Callable[[Activity], str] | Callable[[Activity], int]] = {
    SortKey.TYPE: _type_key,
    SortKey.DELEGATOR: _delegator_key,
    SortKey.INDEXER: _indexer_key,
    SortKey.AMOUNT: _amount_key,
    SortKey.UPDATED: _updated_key,
}


@dataclass(frozen=True, slots=True)
class SortState:
    key: SortKey = SortKey.UPDATED
    direction: SortDirection = SortDirection.DESCENDING

    def toggle(self, key: SortKey) -> SortState:
        """Flip the direction for the current key, or switch to ``key`` ascending."""

        if key is self.key:
            return replace(self, direction=self.direction.flipped())
        return SortState(key=key, direction=SortDirection.ASCENDING)


def sort_activities(activities: Iterable[Activity], state: SortState) -> list[Activity]:
    """Stable sort: records with equal keys keep their incoming relative order."""

    key_function = SORT_KEY_FUNCTIONS[state.key]
    return sorted(
        activities,
        key=key_function,
        reverse=state.direction is SortDirection.DESCENDING,
    )


def filter_by_text(activities: Iterable[Activity], query: str) -> list[Activity]:
    """Keep records whose indexer address or name contains ``query`` (case-insensitive)."""

    needle = query.strip().casefold()
    if not needle:
        return list(activities)
    return [
        activity
        for activity in activities
        if needle in activity.indexer_address.casefold()
        or (activity.indexer_name is not None and needle in activity.indexer_name.casefold())
    ]


def filter_by_window(
    activities: Iterable[Activity],
    window: TimeWindow,
    *,
    clock: Clock = utcnow,
) -> list[Activity]:
    if window.unbounded:
        return list(activities)
    start, end = window.bounds_seconds(clock=clock)
    return [
        activity
        for activity in activities
        if (start is None or activity.effective_timestamp >= start)
        and (end is None or activity.effective_timestamp <= end)
    ]


@dataclass(frozen=True, slots=True)
class ActivityQuery:
    """Operator-selected view over the feed snapshot."""

    text: str = ""
    window: WindowPreset = WindowPreset.ALL
    sort: SortState = field(default_factory=SortState)


def filter_activities(
    activities: Iterable[Activity],
    query: ActivityQuery,
    *,
    clock: Clock = utcnow,
) -> list[Activity]:
    by_text = filter_by_text(activities, query.text)
    return filter_by_window(by_text, query.window.to_window(), clock=clock)


def apply_query(
    activities: Iterable[Activity],
    query: ActivityQuery,
    *,
    clock: Clock = utcnow,
) -> list[Activity]:
    """Filter then sort; filters never depend on the sort order."""

    return sort_activities(filter_activities(activities, query, clock=clock), query.sort)
