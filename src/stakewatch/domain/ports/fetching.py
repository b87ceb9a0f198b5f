"""Ports for fetching delegation data from external providers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from stakewatch.domain.types import NetworkMetrics, RawEventBatch


@runtime_checkable
class EventSource(Protocol):
    """Returns the most recent deposit and withdrawal events, newest first.

    Implementations raise ``TransportError`` or ``MalformedResponseError``.
    """

    async def __call__(self, *, first: int) -> RawEventBatch: ...


@runtime_checkable
class MetricsSource(Protocol):
    """Returns network-wide delegation counters."""

    async def __call__(self) -> NetworkMetrics: ...


__all__ = ["EventSource", "MetricsSource"]
