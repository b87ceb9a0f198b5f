"""Deterministic CSV serialization of the activity feed."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import TYPE_CHECKING, Final

from .types import to_display_units

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .types import Activity, NetworkMetrics

CSV_HEADER: Final[tuple[str, ...]] = (
    "Type",
    "Delegator",
    "Delegator Name",
    "Indexer",
    "Indexer Name",
    "Transaction",
    "Amount",
    "Updated",
)
METRICS_HEADER: Final[tuple[str, ...]] = ("Metric", "Value")
LINE_SEPARATOR: Final[str] = "\n"
FILENAME_PREFIX: Final[str] = "delegation-activity"
METRICS_FILENAME: Final[str] = "graph_metrics.csv"

_CENTS = Decimal("0.01")


@dataclass(frozen=True, slots=True)
class CsvDocument:
    filename: str
    content: str

    def encode(self) -> bytes:
        return self.content.encode("utf-8")


def format_amount(amount: int) -> str:
    """Whole-token amount with exactly two decimals and no grouping separators."""

    value = to_display_units(amount)
    with localcontext() as context:
        # quantize fails instead of rounding when the result exceeds the precision
        context.prec = max(context.prec, len(value.as_tuple().digits) + 2)
        return f"{value.quantize(_CENTS, rounding=ROUND_HALF_UP):f}"


def format_timestamp(seconds: int) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. ``2024-01-07T12:00:00.000Z``."""

    return _iso_millis(datetime.fromtimestamp(seconds, tz=UTC))


def _iso_millis(moment: datetime) -> str:
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{moment.microsecond // 1000:03d}Z"


def quote(value: str | None) -> str:
    text = value or ""
    return '"' + text.replace('"', '""') + '"'


def activity_row(activity: Activity) -> str:
    return ",".join(
        (
            activity.kind.value,
            quote(activity.delegator_address),
            quote(activity.delegator_name),
            quote(activity.indexer_address),
            quote(activity.indexer_name),
            quote(activity.transaction_hash),
            format_amount(activity.effective_amount),
            format_timestamp(activity.effective_timestamp),
        )
    )


def export_csv(activities: Iterable[Activity]) -> str:
    """Header plus one row per activity, in the order given."""

    lines = [",".join(CSV_HEADER)]
    lines.extend(activity_row(activity) for activity in activities)
    return LINE_SEPARATOR.join(lines)


def export_filename(now: datetime) -> str:
    if now.tzinfo is None:
        raise ValueError("Export timestamp must include timezone information")
    stamp = _iso_millis(now.astimezone(UTC))
    return f"{FILENAME_PREFIX}-{stamp.replace(':', '-').replace('.', '-')}.csv"


def export_metrics_csv(metrics: NetworkMetrics) -> str:
    rows = (
        ("Total GRT Supply", metrics.total_supply),
        ("Total Delegators", metrics.delegator_count),
        ("Active Delegators", metrics.active_delegator_count),
        ("Total Curators", metrics.curator_count),
    )
    lines = [",".join(METRICS_HEADER)]
    lines.extend(f"{label},{'' if value is None else value}" for label, value in rows)
    return LINE_SEPARATOR.join(lines)
