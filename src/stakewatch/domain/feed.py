"""Refresh cycle and presentation state for the delegation activity feed."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .aggregation import aggregate, daily_activity, top_indexers_by_net_change
from .enrichment import DEFAULT_LOOKUP_CONCURRENCY, enrich_activities
from .errors import RefreshInProgressError, StakewatchError
from .export import (
    METRICS_FILENAME,
    CsvDocument,
    export_csv,
    export_filename,
    export_metrics_csv,
)
from .filtering import ActivityQuery, apply_query, filter_activities
from .merge import merge_events
from .pagination import Page, build_page
from .time_windows import utcnow
from .types import METRICS_UNAVAILABLE

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from .aggregation import ActivityTotals, DailyActivity, IndexerNetChange
    from .filtering import SortKey, SortState
    from .names import NameResolver
    from .ports.fetching import EventSource, MetricsSource
    from .time_windows import Clock, WindowPreset
    from .types import Activity, NetworkMetrics, RawEventBatch

log = getLogger(__name__)

LOAD_ERROR_MESSAGE: Final[str] = "Failed to load delegation activity."
DEFAULT_PAGE_SIZE: Final[int] = 50


class FeedState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class FeedView:
    """What the presentation layer renders for the current query."""

    page: Page[Activity]
    totals: ActivityTotals
    filtered_count: int
    state: FeedState
    stale: bool

    @property
    def items(self) -> list[Activity]:
        return self.page.items


class FeedController:
    """Drives fetch, merge, enrich and store, and exposes the resulting feed.

    Only one refresh may run at a time. A second call raises
    ``RefreshInProgressError`` unless ``supersede=True`` is passed, in which case
    the earlier refresh finishes but its result is discarded. Cancelling a
    refresh puts the controller back in the state it had before that refresh.
    """

    def __init__(
        self,
        *,
        events: EventSource,
        resolver_factory: Callable[[], NameResolver],
        metrics: MetricsSource | None = None,
        cap: int = 100,
        page_size: int = DEFAULT_PAGE_SIZE,
        lookup_concurrency: int = DEFAULT_LOOKUP_CONCURRENCY,
        clock: Clock = utcnow,
    ) -> None:
        if page_size < 1:
            raise ValueError("Page size must be at least 1")
        self._events = events
        self._metrics_source = metrics
        self._resolver_factory = resolver_factory
        self._cap = cap
        self._page_size = page_size
        self._lookup_concurrency = lookup_concurrency
        self._clock = clock

        self._state = FeedState.IDLE
        # last READY/FAILED/IDLE state, restored when a refresh is cancelled
        self._settled_state = FeedState.IDLE
        self._snapshot: tuple[Activity, ...] = ()
        self._metrics: NetworkMetrics | None = None
        self._error: str | None = None
        self._dropped_events = 0
        self._fetched_at: datetime | None = None
        self._generation = 0
        self._in_flight = False

        self._query = ActivityQuery()
        self._page_number = 1

    # -- state -------------------------------------------------------------

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def snapshot(self) -> tuple[Activity, ...]:
        return self._snapshot

    @property
    def metrics(self) -> NetworkMetrics | None:
        return self._metrics

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def is_stale(self) -> bool:
        return self._state is FeedState.LOADING

    @property
    def dropped_events(self) -> int:
        return self._dropped_events

    @property
    def fetched_at(self) -> datetime | None:
        return self._fetched_at

    @property
    def query(self) -> ActivityQuery:
        return self._query

    @property
    def page_number(self) -> int:
        return self._page_number

    # -- refresh -----------------------------------------------------------

    async def refresh(self, *, supersede: bool = False) -> FeedState:
        if self._in_flight and not supersede:
            raise RefreshInProgressError("A refresh is already in progress")

        self._generation += 1
        generation = self._generation
        self._in_flight = True
        self._state = FeedState.LOADING
        log.info("Refreshing delegation feed (cap=%s)", self._cap)
        try:
            await self._run_refresh(generation)
        except asyncio.CancelledError:
            if generation == self._generation and self._state is FeedState.LOADING:
                log.info("Refresh #%s cancelled; keeping the previous feed", generation)
                self._state = self._settled_state
            raise
        finally:
            if generation == self._generation:
                self._in_flight = False
        return self._state

    async def _run_refresh(self, generation: int) -> None:
        events_result, metrics = await asyncio.gather(
            self._events(first=self._cap),
            self._fetch_metrics(),
            return_exceptions=True,
        )
        if generation != self._generation:
            log.info("Discarding superseded refresh #%s", generation)
            return

        if isinstance(metrics, BaseException):
            # _fetch_metrics only lets cancellation through
            raise metrics

        if isinstance(events_result, BaseException):
            if not isinstance(events_result, Exception):
                raise events_result
            self._fail(events_result, metrics)
            return

        try:
            activities, dropped = await self._reconcile(events_result)
        except Exception as exc:  # noqa: BLE001
            if generation == self._generation:
                self._fail(exc, metrics)
            return

        if generation != self._generation:
            log.info("Discarding superseded refresh #%s", generation)
            return

        self._snapshot = tuple(activities)
        self._dropped_events = dropped
        self._metrics = metrics
        self._error = None
        self._fetched_at = self._clock()
        self._state = self._settled_state = FeedState.READY
        log.info(
            "Feed ready: %s activities, %s dropped events, metrics %s",
            len(activities),
            self._dropped_events,
            "available" if metrics.available else "unavailable",
        )

    async def _reconcile(self, batch: RawEventBatch) -> tuple[list[Activity], int]:
        merged = merge_events(batch.deposits, batch.withdrawals, cap=self._cap)
        resolver = self._resolver_factory()
        enriched = await enrich_activities(
            merged.activities,
            resolver,
            concurrency=self._lookup_concurrency,
        )
        return enriched, merged.dropped_count

    async def _fetch_metrics(self) -> NetworkMetrics:
        if self._metrics_source is None:
            return METRICS_UNAVAILABLE
        try:
            return await self._metrics_source()
        except Exception as exc:  # noqa: BLE001
            log.warning("Network metrics unavailable: %s", exc)
            return METRICS_UNAVAILABLE

    def _fail(self, exc: Exception, metrics: NetworkMetrics) -> None:
        if isinstance(exc, StakewatchError):
            log.error("Delegation feed refresh failed: %s", exc)
        else:
            log.exception("Unexpected error while refreshing the delegation feed", exc_info=exc)
        self._snapshot = ()
        self._dropped_events = 0
        self._metrics = metrics
        self._error = LOAD_ERROR_MESSAGE
        self._state = self._settled_state = FeedState.FAILED

    # -- selectors ---------------------------------------------------------

    def set_filter(self, text: str) -> None:
        self._query = replace(self._query, text=text)
        self._page_number = 1

    def set_window(self, window: WindowPreset) -> None:
        self._query = replace(self._query, window=window)
        self._page_number = 1

    def toggle_sort(self, key: SortKey) -> None:
        self._query = replace(self._query, sort=self._query.sort.toggle(key))

    def set_sort(self, sort: SortState) -> None:
        self._query = replace(self._query, sort=sort)

    def set_page(self, page_number: int) -> None:
        self._page_number = page_number

    def filtered(self) -> list[Activity]:
        """Snapshot records passing the text and time-window filters, unsorted."""

        return filter_activities(self._snapshot, self._query, clock=self._clock)

    def sorted_view(self) -> list[Activity]:
        return apply_query(self._snapshot, self._query, clock=self._clock)

    def view(self) -> FeedView:
        rows = self.sorted_view()
        return FeedView(
            page=build_page(rows, self._page_size, self._page_number),
            totals=aggregate(rows),
            filtered_count=len(rows),
            state=self._state,
            stale=self.is_stale,
        )

    def totals(self) -> ActivityTotals:
        return aggregate(self.filtered())

    def daily_activity(self) -> list[DailyActivity]:
        return daily_activity(self.filtered())

    def top_indexers(self, *, limit: int = 10) -> list[IndexerNetChange]:
        return top_indexers_by_net_change(self.filtered(), limit=limit)

    # -- export ------------------------------------------------------------

    def export_csv(self, *, now: datetime | None = None) -> CsvDocument:
        moment = now or self._clock()
        return CsvDocument(
            filename=export_filename(moment),
            content=export_csv(self.sorted_view()),
        )

    def export_metrics_csv(self) -> CsvDocument | None:
        if self._metrics is None or not self._metrics.available:
            return None
        return CsvDocument(filename=METRICS_FILENAME, content=export_metrics_csv(self._metrics))
