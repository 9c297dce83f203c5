"""
Sync progress store: one fil_last_count row per account.
"""

from __future__ import annotations

from sqlalchemy import select

from filsync.database.connection import Database
from filsync.database.models import SyncCheckpoint
from filsync.database.tables import FilLastCount
from filsync.filsync_logging import get_logger

logger = get_logger(__name__)


class CheckpointStore:
    """Read and upsert the last remote count mirrored for each account."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def get_checkpoint(self, account: str) -> int | None:
        """Return the stored count, or None if the account has never been synced."""
        with self._db.session_scope() as session:
            row = session.get(FilLastCount, account)
            return int(row.last_count) if row is not None else None

    def set_checkpoint(self, account: str, value: int) -> None:
        """Insert or update the account's checkpoint."""
        if value < 0:
            raise ValueError("checkpoint value must be non-negative")
        with self._db.session_scope() as session:
            row = session.get(FilLastCount, account)
            if row is None:
                session.add(FilLastCount(address=account, last_count=value))
            else:
                row.last_count = value
        logger.debug("checkpoint_set", account=account, last_count=value)

    def list_checkpoints(self) -> list[SyncCheckpoint]:
        with self._db.session_scope() as session:
            rows = session.scalars(select(FilLastCount).order_by(FilLastCount.address)).all()
            return [
                SyncCheckpoint(account=row.address, last_known_remote_count=int(row.last_count))
                for row in rows
            ]
