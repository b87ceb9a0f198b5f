"""Error taxonomy for the activity feed.

``TransportError`` and ``MalformedResponseError`` describe upstream failures and
propagate to the feed controller. ``LookupFailure`` and ``ParseError`` are always
absorbed by the component that raises them: a failed name lookup leaves one name
empty and an unparsable event is dropped from the merge.
"""

from __future__ import annotations


class StakewatchError(RuntimeError):
    """Base class for errors raised by the activity pipeline."""


class TransportError(StakewatchError):
    """Raised when an upstream API cannot be reached or answers with an HTTP error."""

    def __init__(self, message: str, *, source: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.source = source
        self.status_code = status_code


class MalformedResponseError(StakewatchError):
    """Raised when an upstream payload is missing expected fields."""

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.source = source


class LookupFailure(StakewatchError):
    """Raised by name lookups; recovered by the resolver as "no name"."""

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(f"Name lookup failed for {address}: {reason}")
        self.address = address
        self.reason = reason


class ParseError(StakewatchError):
    """Describes a raw event that could not be converted into an activity record."""

    def __init__(self, event_id: str, field: str, value: object) -> None:
        super().__init__(f"Event {event_id}: unparsable {field} {value!r}")
        self.event_id = event_id
        self.field = field
        self.value = value


class RefreshInProgressError(StakewatchError):
    """Raised when a refresh is requested while another one is still running."""
