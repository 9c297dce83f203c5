"""
Database layer: mirrored transfers (fil_transfers) and sync checkpoints (fil_last_count).

SQLAlchemy engine from a URL via get_database(); MySQL in production, SQLite
for local runs and tests.
"""

from filsync.database.checkpoints import CheckpointStore
from filsync.database.connection import Database, get_database
from filsync.database.ledger import LedgerStore
from filsync.database.models import (
    AccountTotals,
    Role,
    SyncCheckpoint,
    TransferRecord,
)

__all__ = [
    "AccountTotals",
    "CheckpointStore",
    "Database",
    "LedgerStore",
    "Role",
    "SyncCheckpoint",
    "TransferRecord",
    "get_database",
]
