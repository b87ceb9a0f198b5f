"""Address to display-name resolution with a per-session cache."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import LookupFailure
from .types import normalize_address

if TYPE_CHECKING:
    from .ports.naming import NameLookup

log = getLogger(__name__)


class NameResolver:
    """Resolve addresses to optional names, caching every outcome.

    Failures are cached as "no name" for the lifetime of the resolver, so an
    address is looked up at most once. Concurrent callers asking for the same
    uncached address share one in-flight lookup.
    """

    def __init__(self, lookup: NameLookup, *, timeout_seconds: float | None = None) -> None:
        self._lookup = lookup
        self._timeout_seconds = timeout_seconds
        self._cache: dict[str, str | None] = {}
        self._pending: dict[str, asyncio.Task[str | None]] = {}
        self.lookups = 0
        self.failures = 0

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and normalize_address(address) in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def cached(self, address: str) -> str | None:
        """Return the cached name without triggering a lookup."""

        return self._cache.get(normalize_address(address))

    async def resolve(self, address: str) -> str | None:
        key = normalize_address(address)
        if key in self._cache:
            return self._cache[key]

        task = self._pending.get(key)
        if task is None:
            task = asyncio.create_task(self._resolve_uncached(key))
            self._pending[key] = task
        # shield so one cancelled caller does not cancel the lookup shared by others
        return await asyncio.shield(task)

    async def _resolve_uncached(self, key: str) -> str | None:
        self.lookups += 1
        name: str | None = None
        try:
            async with asyncio.timeout(self._timeout_seconds):
                found = await self._lookup(key)
        except TimeoutError:
            self._record_failure(LookupFailure(key, "timed out"))
        except Exception as exc:  # noqa: BLE001
            self._record_failure(LookupFailure(key, str(exc) or type(exc).__name__))
        else:
            name = found.strip() if found and found.strip() else None
        finally:
            self._pending.pop(key, None)

        self._cache[key] = name
        return name

    def _record_failure(self, failure: LookupFailure) -> None:
        self.failures += 1
        log.warning("%s; caching as unnamed", failure)
