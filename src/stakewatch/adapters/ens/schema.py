"""Pydantic models for ENS subgraph reverse lookups."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class EnsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class EnsDomain(EnsBaseModel):
    name: str | None = None


class EnsDomainsData(EnsBaseModel):
    domains: list[EnsDomain]

    @property
    def first_name(self) -> str | None:
        for domain in self.domains:
            if domain.name and domain.name.strip():
                return domain.name.strip()
        return None


def is_cacheable_payload(payload: object) -> bool:
    """Only successful GraphQL answers are worth keeping in the HTTP cache."""

    return isinstance(payload, dict) and "data" in payload and not payload.get("errors")
