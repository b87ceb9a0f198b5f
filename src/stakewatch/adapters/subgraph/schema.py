"""Pydantic models describing the network subgraph payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator

type RawNumber = str | int | float | None


def _account_id(value: object) -> object:
    # Some subgraph schemas expose accounts as ``{id: ...}`` objects
    if isinstance(value, Mapping):
        return cast("Mapping[str, object]", value).get("id")
    return value


class SubgraphBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class StakeEventPayload(SubgraphBaseModel):
    id: str
    delegator: str
    indexer: str
    tokens: RawNumber
    timestamp_seconds: RawNumber = Field(alias="timestampSeconds")
    transaction_hash: str | None = Field(default=None, alias="transactionHash")

    _normalize_accounts = field_validator("delegator", "indexer", mode="before")(_account_id)


class DelegationEventsData(SubgraphBaseModel):
    deposits: list[StakeEventPayload]
    withdrawals: list[StakeEventPayload]


class GraphNetworkPayload(SubgraphBaseModel):
    delegator_count: RawNumber = Field(default=None, alias="delegatorCount")
    active_delegator_count: RawNumber = Field(default=None, alias="activeDelegatorCount")
    total_supply: RawNumber = Field(default=None, alias="totalSupply")
    curator_count: RawNumber = Field(default=None, alias="curatorCount")


class NetworkMetricsData(SubgraphBaseModel):
    graph_network: GraphNetworkPayload = Field(alias="graphNetwork")
