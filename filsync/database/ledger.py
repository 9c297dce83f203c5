"""
Local ledger store: mirrored transfers and aggregate queries.

Batch writes are all-or-nothing; duplicate ids are skipped by the database
("insert ignore") rather than raising, so re-fetching an already stored page
is harmless.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy import func, insert, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from filsync.core.exceptions import PersistenceError
from filsync.database.connection import Database
from filsync.database.models import AccountTotals, Role, TransferRecord
from filsync.database.tables import FilTransfer
from filsync.filsync_logging import get_logger

logger = get_logger(__name__)

# Transfer types the explorer uses for the totals in AccountTotals
TYPE_RECEIVE = "receive"
TYPE_SEND = "send"
TYPE_REWARD = "reward"
TYPE_BURN = "burn"


def _to_row(record: TransferRecord) -> dict[str, Any]:
    return {
        "cid": record.id,
        "from_addr": record.from_addr,
        "to_addr": record.to_addr,
        "value": record.amount,
        "height": record.height,
        "direction": record.direction,
        "timestamp": record.timestamp,
        "type": record.type,
    }


def _role_column(role: Role | str) -> Any:
    role = Role(role)
    return FilTransfer.to_addr if role is Role.RECIPIENT else FilTransfer.from_addr


def _as_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal(0)
    return value if isinstance(value, Decimal) else Decimal(str(value))


class LedgerStore:
    """fil_transfers access: idempotent batch inserts, counts and typed sums."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def insert_ignoring_duplicates(self, records: Sequence[TransferRecord]) -> int:
        """
        Insert a batch in one transaction; return rows actually inserted.

        Duplicate ids (already stored or repeated within the batch) are skipped.
        Any other failure rolls back the whole batch and raises PersistenceError.
        """
        if not records:
            return 0
        rows = [_to_row(r) for r in records]
        try:
            with self._db.session_scope() as session:
                inserted = self._insert_rows(session, rows)
        except SQLAlchemyError as e:
            logger.error(
                "ledger_batch_insert_failed",
                batch_size=len(rows),
                error=str(e),
            )
            raise PersistenceError(f"batch of {len(rows)} transfers rolled back: {e}") from e
        logger.info(
            "ledger_batch_inserted",
            batch_size=len(rows),
            inserted=inserted,
            duplicates=len(rows) - inserted,
        )
        return inserted

    def _insert_rows(self, session: Session, rows: list[dict[str, Any]]) -> int:
        table = FilTransfer.__table__
        dialect = self._db.dialect_name
        inserted = 0
        if dialect in ("sqlite", "postgresql"):
            make_insert = sqlite_insert if dialect == "sqlite" else pg_insert
            for row in rows:
                stmt = make_insert(table).values(**row).on_conflict_do_nothing(
                    index_elements=[table.c.cid]
                )
                inserted += max(session.execute(stmt).rowcount, 0)
            return inserted
        if dialect in ("mysql", "mariadb"):
            for row in rows:
                stmt = insert(table).values(**row).prefix_with("IGNORE")
                inserted += max(session.execute(stmt).rowcount, 0)
            return inserted
        # Other dialects: skip ids already present, then plain inserts
        ids = [row["cid"] for row in rows]
        seen = set(session.scalars(select(FilTransfer.cid).where(FilTransfer.cid.in_(ids))))
        for row in rows:
            if row["cid"] in seen:
                continue
            session.execute(insert(table).values(**row))
            seen.add(row["cid"])
            inserted += 1
        return inserted

    def count_for_account(self, account: str) -> int:
        """Rows where the account is sender or receiver."""
        stmt = (
            select(func.count())
            .select_from(FilTransfer)
            .where(or_(FilTransfer.from_addr == account, FilTransfer.to_addr == account))
        )
        with self._db.session_scope() as session:
            return int(session.scalar(stmt) or 0)

    def sum_by_type_and_role(self, type_: str, account: str, role: Role | str) -> Decimal:
        """Sum of FIL for one transfer type with the account on the given side; 0 when none."""
        stmt = select(func.sum(FilTransfer.value)).where(
            FilTransfer.type == type_,
            _role_column(role) == account,
        )
        with self._db.session_scope() as session:
            return _as_decimal(session.scalar(stmt))

    def sum_by_type_for_date(
        self,
        type_: str,
        account: str,
        day: date,
        role: Role | str = Role.RECIPIENT,
    ) -> Decimal:
        """Like sum_by_type_and_role, limited to one UTC calendar day."""
        stmt = select(func.sum(FilTransfer.value)).where(
            FilTransfer.type == type_,
            _role_column(role) == account,
            func.date(FilTransfer.timestamp) == day.isoformat(),
        )
        with self._db.session_scope() as session:
            return _as_decimal(session.scalar(stmt))

    def account_totals(self, account: str, day: date) -> AccountTotals:
        """Received, sent, rewarded and burned FIL, plus rewards on `day` and the day before."""
        return AccountTotals(
            account=account,
            received=self.sum_by_type_and_role(TYPE_RECEIVE, account, Role.RECIPIENT),
            sent=self.sum_by_type_and_role(TYPE_SEND, account, Role.SENDER),
            rewards=self.sum_by_type_and_role(TYPE_REWARD, account, Role.RECIPIENT),
            burned=self.sum_by_type_and_role(TYPE_BURN, account, Role.SENDER),
            day=day,
            rewards_on_day=self.sum_by_type_for_date(TYPE_REWARD, account, day),
            rewards_previous_day=self.sum_by_type_for_date(
                TYPE_REWARD, account, day - timedelta(days=1)
            ),
        )

    def list_transfers(self, account: str, *, limit: int = 500) -> list[TransferRecord]:
        """Stored transfers involving the account, newest first."""
        stmt = (
            select(FilTransfer)
            .where(or_(FilTransfer.from_addr == account, FilTransfer.to_addr == account))
            .order_by(FilTransfer.height.desc(), FilTransfer.timestamp.desc(), FilTransfer.cid)
            .limit(limit)
        )
        with self._db.session_scope() as session:
            rows = session.scalars(stmt).all()
            return [
                TransferRecord(
                    id=row.cid,
                    from_addr=row.from_addr,
                    to_addr=row.to_addr,
                    amount=_as_decimal(row.value),
                    height=row.height,
                    direction=row.direction,
                    timestamp=row.timestamp,
                    type=row.type or "unknown",
                )
                for row in rows
            ]
