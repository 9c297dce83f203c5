"""
Command-line entrypoint.

    filsync sync                  incremental pass over ADDRESSES (default)
    filsync full-sync             bootstrap pass paging from the first page
    filsync summary [--date D]    log ledger totals per account

Exit code 1 on configuration or startup errors; per-account sync failures are
logged and do not change the exit code.
"""

from __future__ import annotations

import argparse
import signal
import threading
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from filsync.config import env
from filsync.config.settings import Settings, get_settings
from filsync.core.exceptions import ConfigurationError
from filsync.database import CheckpointStore, LedgerStore, get_database
from filsync.feed.client import FilfoxClient
from filsync.filsync_logging import configure_logging, get_logger
from filsync.sync.engine import ReconciliationEngine
from filsync.sync.runner import run_periodic, run_sync_pass

logger = get_logger("filsync.cli")


def _parse_date(raw: str) -> date:
    try:
        return date.fromisoformat(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {raw!r}") from e


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filsync",
        description="Mirror Filfox transfer history for watched Filecoin accounts.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="sync",
        choices=("sync", "full-sync", "summary"),
    )
    parser.add_argument("--accounts", help="comma-separated accounts; overrides ADDRESSES")
    parser.add_argument("--page-size", type=int, help="override PAGE_SIZE (1-100)")
    parser.add_argument(
        "--interval",
        type=float,
        default=0.0,
        help="repeat sync passes every N seconds until interrupted",
    )
    parser.add_argument("--date", type=_parse_date, help="day for summary (UTC, default today)")
    parser.add_argument("--debug", action="store_true", help="debug logging")
    return parser


def _load_settings(args: argparse.Namespace) -> Settings:
    environ = dict(env.current_environ())
    if args.accounts:
        environ["ADDRESSES"] = args.accounts
    if args.page_size is not None:
        environ["PAGE_SIZE"] = str(args.page_size)
    return get_settings(environ)


def _install_stop_handlers(stop_event: threading.Event) -> None:
    def _handle_sig(signum: int, frame: Any) -> None:
        logger.info("sync_shutdown_signal", signal=signal.Signals(signum).name)
        stop_event.set()

    try:
        signal.signal(signal.SIGINT, _handle_sig)
        if hasattr(signal, "SIGTERM"):
            signal.signal(signal.SIGTERM, _handle_sig)
    except (ValueError, OSError) as e:
        # Signal only valid in main thread / not supported on this platform
        logger.debug("sync_signal_handlers_unavailable", error=str(e))


def _run_summary(settings: Settings, ledger: LedgerStore, checkpoints: CheckpointStore, day: date) -> None:
    for account in settings.addresses:
        totals = ledger.account_totals(account, day)
        logger.info(
            "account_summary",
            checkpoint=checkpoints.get_checkpoint(account),
            transfer_count=ledger.count_for_account(account),
            **totals.to_dict(),
        )


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        settings = _load_settings(args)
    except ConfigurationError as e:
        configure_logging(debug=args.debug)
        logger.error("config_error", error=str(e))
        return 1
    configure_logging(debug=settings.debug or args.debug)

    try:
        db = get_database(settings.database_url)
    except SQLAlchemyError as e:
        logger.error("startup_database_error", database=settings.database_url_safe, error=str(e))
        return 1
    logger.info(
        "filsync_started",
        command=args.command,
        account_count=len(settings.addresses),
        database=settings.database_url_safe,
        api_base=settings.api_base,
    )

    ledger = LedgerStore(db)
    checkpoints = CheckpointStore(db)
    try:
        if args.command == "summary":
            _run_summary(settings, ledger, checkpoints, args.date or datetime.now(timezone.utc).date())
            return 0
        with FilfoxClient(settings.api_base, timeout_sec=settings.request_timeout_sec) as client:
            engine = ReconciliationEngine(client, ledger, checkpoints, page_size=settings.page_size)
            full = args.command == "full-sync"
            if args.interval > 0:
                stop_event = threading.Event()
                _install_stop_handlers(stop_event)
                run_periodic(engine, settings.addresses, args.interval, stop_event, full_first=full)
            else:
                run_sync_pass(engine, settings.addresses, full=full)
        return 0
    finally:
        db.dispose()
