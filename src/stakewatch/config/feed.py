"""Feed sizing and enrichment defaults."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .env import optional_env_float, optional_env_int, optional_env_var
from .errors import InvalidConfigurationError

DEFAULT_PAGE_SIZE = 50
DEFAULT_LOOKUP_CONCURRENCY = 8
DEFAULT_LOOKUP_TIMEOUT_SECONDS = 10.0


class FeedHorizon(StrEnum):
    """How far back the feed reaches, expressed as a cap on merged records."""

    RECENT = "recent"
    EXTENDED = "extended"

    @property
    def cap(self) -> int:
        return 100 if self is FeedHorizon.RECENT else 1000


@dataclass(frozen=True, slots=True)
class FeedConfig:
    horizon: FeedHorizon = FeedHorizon.RECENT
    page_size: int = DEFAULT_PAGE_SIZE
    lookup_concurrency: int = DEFAULT_LOOKUP_CONCURRENCY
    lookup_timeout_seconds: float | None = DEFAULT_LOOKUP_TIMEOUT_SECONDS

    @property
    def event_cap(self) -> int:
        return self.horizon.cap


def get_feed_config() -> FeedConfig:
    raw_horizon = optional_env_var("STAKEWATCH_FEED_HORIZON")
    try:
        horizon = FeedHorizon(raw_horizon.lower()) if raw_horizon else FeedHorizon.RECENT
    except ValueError as exc:
        expected = " or ".join(member.value for member in FeedHorizon)
        raise InvalidConfigurationError(
            "STAKEWATCH_FEED_HORIZON", raw_horizon or "", expected
        ) from exc
    return FeedConfig(
        horizon=horizon,
        lookup_concurrency=optional_env_int(
            "STAKEWATCH_LOOKUP_CONCURRENCY", default=DEFAULT_LOOKUP_CONCURRENCY
        ),
        lookup_timeout_seconds=optional_env_float(
            "STAKEWATCH_LOOKUP_TIMEOUT_SECONDS", default=DEFAULT_LOOKUP_TIMEOUT_SECONDS
        ),
    )
