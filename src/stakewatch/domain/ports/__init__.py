"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import EventSource, MetricsSource
from .naming import NameLookup

__all__ = ["EventSource", "MetricsSource", "NameLookup"]
