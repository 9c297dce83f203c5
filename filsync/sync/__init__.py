"""
Incremental synchronization: reconciliation engine and pass driver.
"""

from filsync.sync.engine import (
    MODE_FULL,
    MODE_INCREMENTAL,
    STATUS_FEED_UNAVAILABLE,
    STATUS_PARTIAL,
    STATUS_SYNCED,
    STATUS_UP_TO_DATE,
    ReconciliationEngine,
    SyncResult,
    TransferFeed,
)
from filsync.sync.runner import SyncReport, run_periodic, run_sync_pass

__all__ = [
    "MODE_FULL",
    "MODE_INCREMENTAL",
    "STATUS_FEED_UNAVAILABLE",
    "STATUS_PARTIAL",
    "STATUS_SYNCED",
    "STATUS_UP_TO_DATE",
    "ReconciliationEngine",
    "SyncReport",
    "SyncResult",
    "TransferFeed",
    "run_periodic",
    "run_sync_pass",
]
