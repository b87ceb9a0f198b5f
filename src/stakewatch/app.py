"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from stakewatch.adapters.ens import EnsNameLookup, is_cacheable_payload
from stakewatch.adapters.subgraph import SubgraphClient
from stakewatch.config import get_ens_config, get_feed_config, get_subgraph_config
from stakewatch.domain.feed import FeedController, FeedState
from stakewatch.domain.names import NameResolver
from stakewatch.domain.time_windows import utcnow

if TYPE_CHECKING:
    from stakewatch.config import FeedConfig
    from stakewatch.domain.ports.naming import NameLookup
    from stakewatch.domain.time_windows import Clock
    from stakewatch.domain.types import NetworkMetrics

log = getLogger(__name__)


def build_feed_controller(
    *,
    name_lookup: NameLookup,
    subgraph: SubgraphClient | None = None,
    feed_config: FeedConfig | None = None,
    clock: Clock = utcnow,
) -> FeedController:
    """Wire the feed controller to the configured subgraph and the given name lookup.

    The caller owns ``name_lookup``; an ``EnsNameLookup`` has to be closed, which
    ``refresh_feed`` does when the lookup is passed to it.
    """

    config = feed_config or get_feed_config()
    source = subgraph or SubgraphClient(config=get_subgraph_config())

    def new_resolver() -> NameResolver:
        return NameResolver(name_lookup, timeout_seconds=config.lookup_timeout_seconds)

    return FeedController(
        events=source.fetch_events,
        metrics=source.fetch_metrics,
        resolver_factory=new_resolver,
        cap=config.event_cap,
        page_size=config.page_size,
        lookup_concurrency=config.lookup_concurrency,
        clock=clock,
    )


async def refresh_feed(
    controller: FeedController,
    *,
    name_lookup: EnsNameLookup | None = None,
) -> FeedState:
    """Run one refresh cycle, closing the ENS client afterwards if one is given."""

    if name_lookup is None:
        return await controller.refresh()
    async with name_lookup:
        return await controller.refresh()


def load_feed(
    *,
    subgraph: SubgraphClient | None = None,
    feed_config: FeedConfig | None = None,
    persistent_name_cache: bool = False,
    clock: Clock = utcnow,
) -> FeedController:
    """Build a controller and run one refresh cycle synchronously."""

    lookup = EnsNameLookup(
        get_ens_config(cache_predicate=is_cacheable_payload, persistent_cache=persistent_name_cache)
    )
    controller = build_feed_controller(
        subgraph=subgraph,
        name_lookup=lookup,
        feed_config=feed_config,
        clock=clock,
    )
    state = asyncio.run(refresh_feed(controller, name_lookup=lookup))
    log.info(
        "Delegation feed loaded: state=%s, activities=%s, dropped=%s",
        state,
        len(controller.snapshot),
        controller.dropped_events,
    )
    return controller


def fetch_network_metrics(*, subgraph: SubgraphClient | None = None) -> NetworkMetrics:
    source = subgraph or SubgraphClient(config=get_subgraph_config())
    return asyncio.run(source.fetch_metrics())
