"""ENS name lookup adapter."""

from __future__ import annotations

from .client import ENS_NAME_QUERY, EnsNameLookup
from .schema import EnsDomainsData, is_cacheable_payload

__all__ = ["ENS_NAME_QUERY", "EnsDomainsData", "EnsNameLookup", "is_cacheable_payload"]
