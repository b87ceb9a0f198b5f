"""Port for resolving addresses to display names."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class NameLookup(Protocol):
    """Look up the primary display name for a lower-cased address.

    Returns ``None`` when the address legitimately has no name. Any exception
    raised is treated by the resolver as a lookup failure.
    """

    async def __call__(self, address: str) -> str | None: ...


__all__ = ["NameLookup"]
