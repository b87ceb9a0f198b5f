"""Core data types for the delegation activity feed."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import Final

TOKEN_DECIMALS: Final[int] = 18


def to_display_units(amount: int) -> Decimal:
    """Convert an amount in the token's smallest unit into whole tokens.

    The result is exact for any magnitude; only the exponent changes.
    """

    sign, digits, _ = Decimal(amount).as_tuple()
    return Decimal((sign, digits, -TOKEN_DECIMALS))


def normalize_address(address: str) -> str:
    return address.strip().lower()


class EventOrigin(StrEnum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class ActivityKind(StrEnum):
    DELEGATION = "Delegation"
    UNDELEGATION = "Undelegation"


@dataclass(frozen=True, slots=True)
class RawEvent:
    """A stake deposit or withdrawal as reported by the event source.

    ``amount`` and ``timestamp_seconds`` are kept in their upstream form; they are
    only validated when the event is merged into the feed.
    """

    id: str
    delegator_address: str
    indexer_address: str
    amount: str | int
    timestamp_seconds: str | int
    transaction_hash: str | None = None


@dataclass(frozen=True, slots=True)
class RawEventBatch:
    deposits: tuple[RawEvent, ...] = ()
    withdrawals: tuple[RawEvent, ...] = ()


@dataclass(frozen=True, slots=True)
class Activity:
    """Unified delegation/undelegation record."""

    id: str
    delegator_address: str
    indexer_address: str
    staked_amount: int = 0
    unstaked_amount: int = 0
    delegated_at: int = 0
    undelegated_at: int = 0
    transaction_hash: str | None = None
    delegator_name: str | None = None
    indexer_name: str | None = None

    @property
    def is_delegation(self) -> bool:
        # Equal timestamps (including 0/0) count as a delegation
        return self.delegated_at >= self.undelegated_at

    @property
    def kind(self) -> ActivityKind:
        return ActivityKind.DELEGATION if self.is_delegation else ActivityKind.UNDELEGATION

    @property
    def effective_timestamp(self) -> int:
        return max(self.delegated_at, self.undelegated_at)

    @property
    def effective_amount(self) -> int:
        return self.staked_amount if self.is_delegation else self.unstaked_amount

    @property
    def delegator_label(self) -> str:
        return self.delegator_name or self.delegator_address

    @property
    def indexer_label(self) -> str:
        return self.indexer_name or self.indexer_address


@dataclass(frozen=True, slots=True)
class NetworkMetrics:
    """Network-wide counters from the secondary metrics source.

    Individual fields are ``None`` when the source omitted them. A source that
    failed outright is represented by ``METRICS_UNAVAILABLE``.
    """

    delegator_count: int | None = None
    active_delegator_count: int | None = None
    total_supply: int | None = None
    curator_count: int | None = None
    available: bool = True


METRICS_UNAVAILABLE: Final[NetworkMetrics] = NetworkMetrics(available=False)


__all__ = [
    "METRICS_UNAVAILABLE",
    "TOKEN_DECIMALS",
    "Activity",
    "ActivityKind",
    "EventOrigin",
    "NetworkMetrics",
    "RawEvent",
    "RawEventBatch",
    "normalize_address",
    "to_display_units",
]
