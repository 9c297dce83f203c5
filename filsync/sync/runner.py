"""
Sync pass driver: run the engine over every watched account.

- run_sync_pass(): one pass, accounts processed sequentially; a failure in one
  account is logged and recorded, and the next account still runs.
- run_periodic(): repeat passes every interval_sec until stop_event is set.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field

from filsync.filsync_logging import get_logger
from filsync.sync.engine import ReconciliationEngine, SyncResult

logger = get_logger(__name__)


@dataclass
class SyncReport:
    """Per-account outcome of one pass."""

    results: dict[str, SyncResult] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> list[str]:
        return [account for account, r in self.results.items() if r.ok]


def run_sync_pass(
    engine: ReconciliationEngine,
    accounts: list[str],
    *,
    full: bool = False,
) -> SyncReport:
    """Sync each account in order. Exceptions never cross account boundaries."""
    report = SyncReport()
    started = time.monotonic()
    for account in accounts:
        try:
            result = engine.full_sync(account) if full else engine.sync_account(account)
        except Exception as e:
            logger.exception("sync_account_failed", account=account, error=str(e))
            report.failed[account] = str(e)
            continue
        report.results[account] = result
    logger.info(
        "sync_pass_finished",
        mode="full" if full else "incremental",
        account_count=len(accounts),
        succeeded=len(report.succeeded),
        failed=len(report.failed),
        incomplete=len(report.results) - len(report.succeeded),
        duration_sec=round(time.monotonic() - started, 3),
    )
    return report


def run_periodic(
    engine: ReconciliationEngine,
    accounts: list[str],
    interval_sec: float,
    stop_event: threading.Event,
    *,
    full_first: bool = False,
) -> int:
    """
    Run passes until stop_event is set; return the number of passes started.

    The first pass may be a full sync (bootstrap); later passes are incremental.
    A crash inside a pass is logged and the loop continues.
    """
    interval = max(1.0, interval_sec)
    logger.info("periodic_sync_started", interval_sec=interval, account_count=len(accounts))
    passes = 0
    while not stop_event.is_set():
        full = full_first and passes == 0
        passes += 1
        try:
            run_sync_pass(engine, accounts, full=full)
        except Exception as e:
            logger.exception("periodic_sync_pass_error", pass_number=passes, error=str(e))
        if stop_event.wait(timeout=interval):
            break
    logger.info("periodic_sync_stopped", passes=passes)
    return passes
