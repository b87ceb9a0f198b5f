"""Time windows used to restrict the activity feed to recent records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Protocol


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def _ensure_aware(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        raise ValueError("Time window values must include timezone information")
    return value.astimezone(UTC)


@dataclass(frozen=True)
class TimeWindow:
    """Describe temporal bounds for the feed.

    ``lookback`` is anchored at ``end`` when given, otherwise at the clock. An
    unbounded window (all fields ``None``) keeps every record.
    """

    start: datetime | None = None
    end: datetime | None = None
    lookback: timedelta | None = None

    @property
    def unbounded(self) -> bool:
        return self.start is None and self.end is None and self.lookback is None

    def resolve(self, *, clock: Clock = utcnow) -> tuple[datetime | None, datetime | None]:
        """Resolve the window into concrete UTC timestamps."""

        resolved_end = _ensure_aware(self.end)
        resolved_start = _ensure_aware(self.start)

        if self.lookback is not None:
            if self.lookback < timedelta(0):
                raise ValueError("Lookback duration must be non-negative")
            anchor = resolved_end or clock()
            if anchor.tzinfo is None:
                anchor = anchor.replace(tzinfo=UTC)
            start_from_lookback = anchor.astimezone(UTC) - self.lookback
            if resolved_start is None:
                resolved_start = start_from_lookback
            else:
                resolved_start = max(resolved_start, start_from_lookback)

        if resolved_start and resolved_end and resolved_start > resolved_end:
            raise ValueError("Time window start must be before end")

        return resolved_start, resolved_end

    def bounds_seconds(self, *, clock: Clock = utcnow) -> tuple[int | None, int | None]:
        start, end = self.resolve(clock=clock)
        return (
            int(start.timestamp()) if start is not None else None,
            int(end.timestamp()) if end is not None else None,
        )


class WindowPreset(StrEnum):
    """Selectable recency windows for the activity feed."""

    ALL = "all"
    LAST_24H = "24h"
    LAST_48H = "48h"
    LAST_72H = "72h"

    @property
    def lookback(self) -> timedelta | None:
        hours = {
            WindowPreset.ALL: None,
            WindowPreset.LAST_24H: 24,
            WindowPreset.LAST_48H: 48,
            WindowPreset.LAST_72H: 72,
        }[self]
        return None if hours is None else timedelta(hours=hours)

    def to_window(self) -> TimeWindow:
        return TimeWindow(lookback=self.lookback)


__all__ = ["Clock", "TimeWindow", "WindowPreset", "utcnow"]
