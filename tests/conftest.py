"""
Pytest fixtures for filsync tests. Uses a temporary SQLite DB and an in-memory feed.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from filsync.core.exceptions import FeedTransportError
from filsync.database import CheckpointStore, LedgerStore, get_database
from filsync.feed.models import RawTransfer, TransfersPage
from filsync.sync.engine import ReconciliationEngine

WATCHED = "f01234"
OTHER = "f05678"
ONE_FIL = 10**18


def make_raw(
    n: int,
    *,
    account: str = WATCHED,
    counterparty: str = "f1counterparty",
    outgoing: bool = False,
    value: str | None = None,
    type_: str | None = "receive",
    timestamp: int | None = None,
) -> RawTransfer:
    """Build a distinct feed entry; n keeps height, message and timestamp unique."""
    return RawTransfer(
        from_addr=account if outgoing else counterparty,
        to_addr=counterparty if outgoing else account,
        value=value if value is not None else str((n + 1) * ONE_FIL),
        height=1_000_000 + n,
        timestamp=timestamp if timestamp is not None else 1_700_000_000 + n * 30,
        type=type_,
        message=f"bafy2bzacemsg{n:06d}",
    )


class FakeFeed:
    """
    In-memory transfer feed, newest first like the explorer.

    total_override makes get_total_count disagree with the entries available;
    fail_pages raises FeedTransportError for those page indexes; on_page is
    called before each page is served.
    """

    def __init__(self) -> None:
        self.entries: dict[str, list[RawTransfer]] = {}
        self.total_override: dict[str, int] = {}
        self.fail_total: dict[str, Exception] = {}
        self.fail_pages: set[int] = set()
        self.on_page: Callable[[str, int, int], Any] | None = None
        self.page_calls: list[tuple[str, int, int]] = []
        self.total_calls: list[str] = []

    def set_history(self, account: str, entries: list[RawTransfer]) -> None:
        self.entries[account] = list(entries)

    def prepend(self, account: str, entries: list[RawTransfer]) -> None:
        self.entries[account] = list(entries) + self.entries.get(account, [])

    def get_total_count(self, account: str) -> int:
        self.total_calls.append(account)
        if account in self.fail_total:
            raise self.fail_total[account]
        if account in self.total_override:
            return self.total_override[account]
        return len(self.entries.get(account, []))

    def get_page(self, account: str, page_index: int, page_size: int) -> TransfersPage:
        self.page_calls.append((account, page_index, page_size))
        if self.on_page is not None:
            self.on_page(account, page_index, page_size)
        if page_index in self.fail_pages:
            raise FeedTransportError("simulated timeout", account=account)
        entries = self.entries.get(account, [])
        start = page_index * page_size
        return TransfersPage(
            total_count=self.total_override.get(account, len(entries)),
            transfers=entries[start:start + page_size],
        )


@pytest.fixture
def db(tmp_path):
    """Fresh SQLite database with the schema created."""
    database = get_database(f"sqlite:///{tmp_path / 'filsync.db'}")
    yield database
    database.dispose()


@pytest.fixture
def ledger(db):
    return LedgerStore(db)


@pytest.fixture
def checkpoints(db):
    return CheckpointStore(db)


@pytest.fixture
def feed():
    return FakeFeed()


@pytest.fixture
def engine(feed, ledger, checkpoints):
    return ReconciliationEngine(feed, ledger, checkpoints, page_size=100)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run with no filsync variables from the host and no .env lookup surprises."""
    for name in (
        "ADDRESSES",
        "FILFOX_API",
        "DATABASE_URL",
        "MYSQL_HOST",
        "MYSQL_PORT",
        "MYSQL_USER",
        "MYSQL_PASSWORD",
        "MYSQL_DB",
        "FILSYNC_DB_PATH",
        "PAGE_SIZE",
        "REQUEST_TIMEOUT",
        "DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
