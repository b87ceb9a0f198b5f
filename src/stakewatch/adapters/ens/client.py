"""Reverse name lookups against an ENS subgraph."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from stakewatch.adapters.graphql import execute_query
from stakewatch.adapters.http_resilience import ResilientClient
from stakewatch.domain.errors import LookupFailure

from .schema import EnsDomainsData

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from stakewatch.config.http_resilience import ResilienceConfig
    from stakewatch.config.subgraph import EnsConfig

log = getLogger(__name__)

ENS_SOURCE = "name source"

ENS_NAME_QUERY = """
query GetEnsName($address: String!) {
  domains(where: { resolvedAddress: $address, name_ends_with: ".eth" }, first: 1) {
    name
  }
}
"""


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class EnsNameLookup:
    """Callable name lookup backed by one HTTP client for its whole lifetime.

    Use as an async context manager so the client (and its response cache) is
    closed once the refresh that needed it is done.
    """

    def __init__(
        self,
        config: EnsConfig,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] = _default_client_factory,
    ) -> None:
        self._config = config
        self._client_factory = client_factory
        self._client: ResilientClient | None = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    async def __aenter__(self) -> EnsNameLookup:
        self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()

    async def __call__(self, address: str) -> str | None:
        client = self._ensure_client()
        data = await execute_query(
            client,
            self._config.url,
            ENS_NAME_QUERY,
            source=ENS_SOURCE,
            variables={"address": address.lower()},
            cache_by_body=True,
        )
        try:
            domains = EnsDomainsData.model_validate(data)
        except ValidationError as exc:
            raise LookupFailure(address, "malformed ENS response") from exc
        name = domains.first_name
        log.debug("ENS name for %s: %s", address, name)
        return name

    def _ensure_client(self) -> ResilientClient:
        if self._client is None:
            self._client = self._client_factory(self._config.resilience)
        return self._client
