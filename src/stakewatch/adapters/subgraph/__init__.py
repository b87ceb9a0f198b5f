"""Network subgraph adapter: delegation events and network metrics."""

from __future__ import annotations

from .client import SubgraphClient
from .schema import DelegationEventsData, NetworkMetricsData, StakeEventPayload
from .translator import parse_count, translate_event, translate_events, translate_metrics

__all__ = [
    "DelegationEventsData",
    "NetworkMetricsData",
    "StakeEventPayload",
    "SubgraphClient",
    "parse_count",
    "translate_event",
    "translate_events",
    "translate_metrics",
]
