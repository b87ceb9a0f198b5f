"""Attach resolved display names to activity records."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from .types import normalize_address

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .names import NameResolver
    from .types import Activity

log = getLogger(__name__)

DEFAULT_LOOKUP_CONCURRENCY = 8


def referenced_addresses(activities: Iterable[Activity]) -> list[str]:
    """Distinct lower-cased addresses in both roles, in first-seen order."""

    seen: dict[str, None] = {}
    for activity in activities:
        seen.setdefault(normalize_address(activity.delegator_address))
        seen.setdefault(normalize_address(activity.indexer_address))
    return list(seen)


async def enrich_activities(
    activities: Sequence[Activity],
    resolver: NameResolver,
    *,
    concurrency: int = DEFAULT_LOOKUP_CONCURRENCY,
) -> list[Activity]:
    """Return copies of ``activities`` with delegator and indexer names filled in.

    All distinct addresses are resolved before any record is rebuilt, so the
    result is either fully enriched or an exception is raised and nothing is
    returned. Unresolvable addresses simply leave the name empty.
    """

    if concurrency < 1:
        raise ValueError("Lookup concurrency must be at least 1")

    addresses = referenced_addresses(activities)
    names: dict[str, str | None] = {}
    semaphore = asyncio.Semaphore(concurrency)

    async def resolve_one(address: str) -> None:
        async with semaphore:
            names[address] = await resolver.resolve(address)

    async with asyncio.TaskGroup() as group:
        for address in addresses:
            group.create_task(resolve_one(address))

    log.debug(
        "Resolved %s addresses (%s named, %s external lookups)",
        len(addresses),
        sum(1 for name in names.values() if name),
        resolver.lookups,
    )
    return [_with_names(activity, names) for activity in activities]


def _with_names(activity: Activity, names: dict[str, str | None]) -> Activity:
    return replace(
        activity,
        delegator_name=names.get(normalize_address(activity.delegator_address))
        or activity.delegator_name,
        indexer_name=names.get(normalize_address(activity.indexer_address))
        or activity.indexer_name,
    )
