"""Minimal GraphQL-over-HTTP helper shared by the subgraph adapters."""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING, cast

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from stakewatch.domain.errors import MalformedResponseError, TransportError

if TYPE_CHECKING:
    from .http_resilience import RequestOptions, ResilientClient

log = getLogger(__name__)


class GraphQLError(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str


class GraphQLEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: dict[str, object] | None = None
    errors: list[GraphQLError] | None = None


async def execute_query(
    client: ResilientClient,
    url: str,
    query: str,
    *,
    source: str,
    variables: Mapping[str, object] | None = None,
    cache_by_body: bool = False,
) -> dict[str, object]:
    """POST ``query`` and return the ``data`` mapping.

    HTTP and network failures become ``TransportError``; non-JSON bodies,
    GraphQL ``errors`` and a missing ``data`` member become
    ``MalformedResponseError``.
    """

    body: dict[str, object] = {"query": query}
    if variables:
        body["variables"] = dict(variables)

    options: RequestOptions = {"json": body}
    if cache_by_body:
        options["extensions"] = {"hishel_body_key": True}

    try:
        response = await client.post(url, **options)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise TransportError(
            f"{source} answered HTTP {status}", source=source, status_code=status
        ) from exc
    except httpx.HTTPError as exc:
        raise TransportError(f"{source} unreachable: {exc}", source=source) from exc

    try:
        payload = response.json()
    except ValueError as exc:
        raise MalformedResponseError(f"{source} returned a non-JSON body", source=source) from exc
    if not isinstance(payload, Mapping):
        raise MalformedResponseError(f"{source} returned an unexpected payload", source=source)

    try:
        envelope = GraphQLEnvelope.model_validate(cast("Mapping[str, object]", payload))
    except ValidationError as exc:
        msg = f"{source} returned an invalid envelope"
        raise MalformedResponseError(msg, source=source) from exc

    if envelope.errors:
        messages = "; ".join(error.message for error in envelope.errors)
        log.error("%s GraphQL errors: %s", source, messages)
        raise MalformedResponseError(f"{source} GraphQL errors: {messages}", source=source)
    if envelope.data is None:
        raise MalformedResponseError(f"{source} response has no data", source=source)
    return envelope.data
