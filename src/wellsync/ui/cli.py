from __future__ import annotations

import argparse
import logging
import sys
import threading
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from wellsync.app import check_api_health, get_store_stats, sync_platform_wells_from_api
from wellsync.config import ConfigurationError, configure_logging
from wellsync.domain.data_integration import SyncStatus

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

_CANCEL = threading.Event()


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise platform and well data")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Fetch platforms and wells and reconcile the store")
    sync.add_argument(
        "--source",
        choices=("actual", "dummy"),
        default="actual",
        help="Endpoint to fetch from first (the other one is the fallback)",
    )
    sync.add_argument(
        "--no-fallback",
        action="store_true",
        help="Do not retry against the fallback endpoint when the primary fails",
    )

    subparsers.add_parser("health", help="Check API connectivity")
    subparsers.add_parser("stats", help="Show what the store currently holds")

    return parser.parse_args(list(argv))


def _run_sync(args: argparse.Namespace) -> int:
    report = sync_platform_wells_from_api(
        source=args.source,
        use_fallback=False if args.no_fallback else None,
        cancel=_CANCEL,
    )
    if report.status is SyncStatus.FAILED:
        log.error("Sync failed during %s: %s", report.failure_stage, report.error)
        return EXIT_FAILURE
    if report.status is SyncStatus.NO_DATA:
        log.warning("Nothing to sync: %s", report.error)
        return EXIT_OK

    log.info(
        "Platforms: %s inserted, %s updated, %s unchanged, %s errors. "
        "Wells: %s inserted, %s updated, %s unchanged, %s errors.",
        report.platforms.inserted,
        report.platforms.updated,
        report.platforms.unchanged,
        report.platforms.errors,
        report.wells.inserted,
        report.wells.updated,
        report.wells.unchanged,
        report.wells.errors,
    )
    stats = get_store_stats()
    log.info("Store now holds %s platforms and %s wells", stats.platforms, stats.wells)
    return EXIT_OK


def _run_health() -> int:
    return EXIT_OK if check_api_health() else EXIT_FAILURE


def _run_stats() -> int:
    stats = get_store_stats()
    last = stats.last_reconciled_at.isoformat() if stats.last_reconciled_at else "never"
    log.info("Platforms: %s, wells: %s, last reconciled: %s", stats.platforms, stats.wells, last)
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    # argparse exits with EXIT_USAGE on invalid arguments
    parsed_args = _parse_args(argv if argv is not None else sys.argv[1:])

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "sync":
            code = _run_sync(parsed_args)
        elif parsed_args.command == "health":
            code = _run_health()
        elif parsed_args.command == "stats":
            code = _run_stats()
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ConfigurationError:
        log.exception("Invalid configuration")
        sys.exit(EXIT_USAGE)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(EXIT_FAILURE)

    sys.exit(code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully.

    The first interrupt asks a running sync to stop at the next stage boundary;
    a second one exits immediately.
    """
    if _CANCEL.is_set():
        log.info("Closed by user (Ctrl+C)")
        sys.exit(EXIT_FAILURE)
    log.info("Cancelling sync after the current stage (Ctrl+C again to exit)")
    _CANCEL.set()


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
