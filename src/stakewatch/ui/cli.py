# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from stakewatch.app import fetch_network_metrics, load_feed
from stakewatch.config import FeedHorizon, configure_logging, get_feed_config
from stakewatch.domain.export import (
    METRICS_FILENAME,
    export_metrics_csv,
    format_amount,
    format_timestamp,
)
from stakewatch.domain.filtering import SortDirection, SortKey, SortState
from stakewatch.domain.time_windows import WindowPreset

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from stakewatch.domain.feed import FeedController, FeedView
    from stakewatch.domain.types import NetworkMetrics

log = logging.getLogger(__name__)


def _add_view_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--filter",
        type=str,
        default="",
        help="Only show activity whose indexer address or name contains this text",
    )
    parser.add_argument(
        "--window",
        choices=[preset.value for preset in WindowPreset],
        default=WindowPreset.ALL.value,
        help="Restrict to activity within the last N hours (default: %(default)s)",
    )
    parser.add_argument(
        "--sort",
        choices=[key.value for key in SortKey],
        default=SortKey.UPDATED.value,
        help="Column to sort by (default: %(default)s)",
    )
    parser.add_argument(
        "--direction",
        choices=[direction.value for direction in SortDirection],
        default=SortDirection.DESCENDING.value,
        help="Sort direction (default: %(default)s)",
    )
    parser.add_argument(
        "--horizon",
        choices=[horizon.value for horizon in FeedHorizon],
        default=None,
        help="Feed size: recent (100 events) or extended (1000 events); defaults to config",
    )
    parser.add_argument(
        "--persistent-name-cache",
        action="store_true",
        help="Keep ENS lookups in the on-disk HTTP cache between runs",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect delegation activity")
    subparsers = parser.add_subparsers(dest="command", required=True)

    feed = subparsers.add_parser("feed", help="Print one page of delegation activity")
    _add_view_arguments(feed)
    feed.add_argument(
        "--page",
        type=int,
        default=1,
        help="1-based page number (default: %(default)s)",
    )

    export = subparsers.add_parser("export", help="Export delegation activity as CSV")
    _add_view_arguments(export)
    export.add_argument(
        "--output-dir",
        type=Path,
        default=Path(),
        help="Directory the CSV file is written to (default: current directory)",
    )

    metrics = subparsers.add_parser("metrics", help="Show network delegation metrics")
    metrics.add_argument(
        "--output-dir",
        type=Path,
        help="Also write the metrics as CSV into this directory",
    )

    return parser.parse_args(list(argv))


def _load_controller(args: argparse.Namespace) -> FeedController:
    config = get_feed_config()
    if args.horizon is not None:
        config = replace(config, horizon=FeedHorizon(args.horizon))
    controller = load_feed(feed_config=config, persistent_name_cache=args.persistent_name_cache)
    controller.set_filter(args.filter)
    controller.set_window(WindowPreset(args.window))
    controller.set_sort(SortState(key=SortKey(args.sort), direction=SortDirection(args.direction)))
    return controller


def _print_view(view: FeedView) -> None:
    totals = view.totals
    print(f"Total delegated:   {format_amount(totals.total_delegated)} GRT")
    print(f"Total undelegated: {format_amount(totals.total_undelegated)} GRT")
    print(f"Net change:        {format_amount(totals.net_change)} GRT")
    print()
    if not view.items:
        print("No delegation activity found.")
        return
    for activity in view.items:
        print(
            f"{activity.kind.value:<12} {activity.delegator_label:<44} "
            f"{activity.indexer_label:<44} {format_amount(activity.effective_amount):>18} "
            f"{format_timestamp(activity.effective_timestamp)}"
        )
    page = view.page
    print()
    print(f"Page {page.number} of {page.total_pages} ({view.filtered_count} records)")


def _print_metrics(metrics: NetworkMetrics) -> None:
    def show(value: int | None) -> str:
        return "unavailable" if value is None else f"{value:,}"

    supply = (
        "unavailable"
        if metrics.total_supply is None
        else f"{format_amount(metrics.total_supply)} GRT"
    )
    print(f"Total GRT supply:  {supply}")
    print(f"Total delegators:  {show(metrics.delegator_count)}")
    print(f"Active delegators: {show(metrics.active_delegator_count)}")
    print(f"Total curators:    {show(metrics.curator_count)}")


def _run_feed(args: argparse.Namespace) -> int:
    controller = _load_controller(args)
    if controller.error:
        log.error(controller.error)
        return 1
    controller.set_page(args.page)
    _print_view(controller.view())
    if controller.dropped_events:
        log.warning("%s malformed events were skipped", controller.dropped_events)
    return 0


def _run_export(args: argparse.Namespace) -> int:
    controller = _load_controller(args)
    if controller.error:
        log.error(controller.error)
        return 1
    document = controller.export_csv()
    output_dir: Path = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / document.filename
    target.write_bytes(document.encode())
    log.info("Wrote %s", target)
    return 0


def _run_metrics(args: argparse.Namespace) -> int:
    metrics = fetch_network_metrics()
    _print_metrics(metrics)
    if args.output_dir is not None:
        output_dir: Path = args.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        target = output_dir / METRICS_FILENAME
        target.write_text(export_metrics_csv(metrics), encoding="utf-8")
        log.info("Wrote %s", target)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if getattr(parsed_args, "page", 1) < 1:
            raise ValueError("Page number must be at least 1")  # noqa: TRY301
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "feed":
            exit_code = _run_feed(parsed_args)
        elif parsed_args.command == "export":
            exit_code = _run_export(parsed_args)
        elif parsed_args.command == "metrics":
            exit_code = _run_metrics(parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
