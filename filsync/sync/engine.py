"""
Reconciliation engine: mirror the remote transfer feed into the local ledger.

Incremental pass per account:
1. remote_total from the feed, local_total from the ledger; needed = difference.
2. Page with size min(page_size, needed) until `needed` new rows are stored
   or the feed runs short, writing each page before fetching the next, so a
   crash keeps every committed page.
3. Advance the checkpoint to remote_total once paging ends.

Positional reconciliation: the feed must keep a stable newest-first order
between calls, so normally the first `needed` entries are exactly the ones
not yet mirrored. After an interrupted pass the gap sits just below the
stored head; one extra page beyond the delta is allowed for that, and pages
that turn out to be already stored are skipped because inserts ignore known
ids. A gap deeper than that is logged (sync_gap_not_reached) and left to
full_sync.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Protocol

from filsync.config.env import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from filsync.core.exceptions import FeedError
from filsync.database.checkpoints import CheckpointStore
from filsync.database.ledger import LedgerStore
from filsync.feed.models import TransfersPage
from filsync.feed.normalizer import normalize_transfer
from filsync.filsync_logging import bind_account

MODE_INCREMENTAL = "incremental"
MODE_FULL = "full"

STATUS_UP_TO_DATE = "up_to_date"
STATUS_SYNCED = "synced"
STATUS_PARTIAL = "partial"
STATUS_FEED_UNAVAILABLE = "feed_unavailable"


class TransferFeed(Protocol):
    """
    What the engine needs from the remote feed; FilfoxClient implements it.

    The engine uses the strict methods so it can tell a failed request from an
    empty feed. FilfoxClient.fetch_page and fetch_total_count keep the
    soft contract (empty list or 0 on failure) for callers that want it.
    """

    def get_total_count(self, account: str) -> int: ...

    def get_page(self, account: str, page_index: int, page_size: int) -> TransfersPage: ...


@dataclass
class SyncResult:
    """Outcome of one pass for one account."""

    account: str
    mode: str
    status: str = STATUS_SYNCED
    remote_total: int = 0
    local_before: int = 0
    local_after: int = 0
    fetched: int = 0
    inserted: int = 0
    pages: int = 0
    malformed_values: int = 0
    malformed_entries: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in (STATUS_UP_TO_DATE, STATUS_SYNCED)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ReconciliationEngine:
    """Incremental and full sync of one account at a time."""

    def __init__(
        self,
        feed: TransferFeed,
        ledger: LedgerStore,
        checkpoints: CheckpointStore,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if not (1 <= page_size <= MAX_PAGE_SIZE):
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        self._feed = feed
        self._ledger = ledger
        self._checkpoints = checkpoints
        self._page_size = page_size

    @property
    def page_size(self) -> int:
        return self._page_size

    def sync_account(self, account: str) -> SyncResult:
        """
        Fetch only the entries the ledger is missing for `account`.

        Feed failures end the pass with status feed_unavailable/partial and
        leave the checkpoint alone; PersistenceError propagates to the caller.
        """
        log = bind_account(account)
        result = SyncResult(account=account, mode=MODE_INCREMENTAL)
        try:
            remote_total = self._feed.get_total_count(account)
        except FeedError as e:
            log.warning("sync_feed_unavailable", stage="total_count", error=str(e))
            result.status = STATUS_FEED_UNAVAILABLE
            result.error = str(e)
            return result

        local_total = self._ledger.count_for_account(account)
        needed = remote_total - local_total
        result.remote_total = remote_total
        result.local_before = local_total
        log.info(
            "sync_delta",
            remote_total=remote_total,
            local_total=local_total,
            needed=needed,
            checkpoint=self._checkpoints.get_checkpoint(account),
        )
        if needed <= 0:
            result.status = STATUS_UP_TO_DATE
            result.local_after = local_total
            self._advance_checkpoint(account, remote_total)
            log.info("sync_up_to_date", remote_total=remote_total, local_total=local_total)
            return result

        # Offsets are page_index * size, so the size stays fixed for the whole pass
        request_size = min(self._page_size, needed)
        # The delta's own pages plus one boundary page of already stored rows
        max_pages = math.ceil(needed / request_size) + 1
        page_index = 0
        exhausted = False
        while result.inserted < needed and page_index < max_pages:
            try:
                page = self._feed.get_page(account, page_index, request_size)
            except FeedError as e:
                log.warning("sync_feed_unavailable", stage="page", page=page_index, error=str(e))
                result.status = STATUS_PARTIAL
                result.error = str(e)
                break
            self._store_page(account, page, result)
            page_index += 1
            received = len(page.transfers) + page.skipped
            if received < request_size:
                exhausted = True
                if result.inserted < needed:
                    log.warning(
                        "sync_short_page",
                        page=page_index - 1,
                        expected=request_size,
                        received=received,
                        missing=needed - result.inserted,
                    )
                break

        if result.status != STATUS_PARTIAL and not exhausted and result.inserted < needed:
            # Missing rows sit deeper in the feed than the delta reaches
            log.warning(
                "sync_gap_not_reached",
                pages=page_index,
                missing=needed - result.inserted,
                hint="run full-sync to backfill",
            )

        result.local_after = self._ledger.count_for_account(account)
        if result.status != STATUS_PARTIAL:
            result.status = STATUS_SYNCED
            self._advance_checkpoint(account, remote_total)
        log.info("sync_account_done", **result.to_dict())
        return result

    def full_sync(self, account: str) -> SyncResult:
        """
        Bootstrap: page from 0 until the feed returns an empty page.

        The remote total is read before paging but written to the checkpoint
        only after every page is stored.
        """
        log = bind_account(account)
        result = SyncResult(account=account, mode=MODE_FULL)
        try:
            remote_total = self._feed.get_total_count(account)
        except FeedError as e:
            log.warning("sync_feed_unavailable", stage="total_count", error=str(e))
            result.status = STATUS_FEED_UNAVAILABLE
            result.error = str(e)
            return result
        result.remote_total = remote_total
        result.local_before = self._ledger.count_for_account(account)
        log.info("full_sync_started", remote_total=remote_total, local_total=result.local_before)

        # Guard against a feed that ignores the page parameter
        max_pages = remote_total // self._page_size + 2
        page_index = 0
        while page_index < max_pages:
            try:
                page = self._feed.get_page(account, page_index, self._page_size)
            except FeedError as e:
                log.warning("sync_feed_unavailable", stage="page", page=page_index, error=str(e))
                result.status = STATUS_PARTIAL
                result.error = str(e)
                break
            if not page.transfers and not page.skipped:
                break
            self._store_page(account, page, result)
            page_index += 1
        else:
            log.warning("full_sync_page_limit", max_pages=max_pages)

        result.local_after = self._ledger.count_for_account(account)
        if result.status != STATUS_PARTIAL:
            result.status = STATUS_SYNCED
            self._advance_checkpoint(account, remote_total)
        log.info("full_sync_done", **result.to_dict())
        return result

    def _store_page(self, account: str, page: TransfersPage, result: SyncResult) -> None:
        result.malformed_entries += page.skipped
        records = []
        for raw in page.transfers:
            normalized = normalize_transfer(raw, account)
            if not normalized.value_ok:
                result.malformed_values += 1
                bind_account(account).warning(
                    "transfer_value_unparseable",
                    transfer_id=normalized.record.id,
                    raw_value=raw.value,
                    height=raw.height,
                )
            records.append(normalized.record)
        result.inserted += self._ledger.insert_ignoring_duplicates(records)
        result.fetched += len(page.transfers)
        result.pages += 1

    def _advance_checkpoint(self, account: str, remote_total: int) -> None:
        """Write remote_total unless the stored checkpoint is already higher."""
        previous = self._checkpoints.get_checkpoint(account)
        if previous is not None and previous >= remote_total:
            return
        self._checkpoints.set_checkpoint(account, remote_total)
        bind_account(account).info("checkpoint_advanced", previous=previous, last_count=remote_total)
