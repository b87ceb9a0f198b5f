"""GraphQL client for the network subgraph."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from stakewatch.adapters.graphql import execute_query
from stakewatch.adapters.http_resilience import ResilientClient
from stakewatch.domain.errors import MalformedResponseError

from .schema import DelegationEventsData, NetworkMetricsData
from .translator import translate_events, translate_metrics

if TYPE_CHECKING:
    from collections.abc import Callable

    from stakewatch.config.http_resilience import ResilienceConfig
    from stakewatch.config.subgraph import SubgraphConfig
    from stakewatch.domain.types import NetworkMetrics, RawEventBatch

log = getLogger(__name__)

EVENTS_SOURCE = "event source"
METRICS_SOURCE = "metrics source"

DELEGATION_EVENTS_QUERY = """
query DelegationEvents($first: Int!) {
  deposits: stakeDelegateds(first: $first, orderBy: blockTimestamp, orderDirection: desc) {
    id
    delegator
    indexer
    tokens
    timestampSeconds: blockTimestamp
    transactionHash
  }
  withdrawals: stakeDelegatedWithdrawns(
    first: $first
    orderBy: blockTimestamp
    orderDirection: desc
  ) {
    id
    delegator
    indexer
    tokens
    timestampSeconds: blockTimestamp
    transactionHash
  }
}
"""

NETWORK_METRICS_QUERY = """
{
  graphNetwork(id: "1") {
    totalSupply
    delegatorCount
    activeDelegatorCount
    curatorCount
  }
}
"""


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class SubgraphClient:
    """Fetches delegation events and network metrics from the network subgraph."""

    config: SubgraphConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def fetch_events(self, *, first: int) -> RawEventBatch:
        async with self.client_factory(self.config.resilience) as client:
            data = await execute_query(
                client,
                self.config.url,
                DELEGATION_EVENTS_QUERY,
                source=EVENTS_SOURCE,
                variables={"first": first},
            )
        try:
            events = DelegationEventsData.model_validate(data)
        except ValidationError as exc:
            log.error("Malformed delegation events payload: %s", exc)
            raise MalformedResponseError(
                "Delegation events payload is missing expected fields", source=EVENTS_SOURCE
            ) from exc
        log.debug(
            "Fetched %s deposits and %s withdrawals", len(events.deposits), len(events.withdrawals)
        )
        return translate_events(events)

    async def fetch_metrics(self) -> NetworkMetrics:
        async with self.client_factory(self.config.resilience) as client:
            data = await execute_query(
                client,
                self.config.url,
                NETWORK_METRICS_QUERY,
                source=METRICS_SOURCE,
            )
        try:
            metrics = NetworkMetricsData.model_validate(data)
        except ValidationError as exc:
            raise MalformedResponseError(
                "No graphNetwork entity returned", source=METRICS_SOURCE
            ) from exc
        return translate_metrics(metrics.graph_network)

