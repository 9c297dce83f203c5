"""
Filfox transfer feed client.

Responsibilities:
- Fetch one page of transfers and the total transfer count for an account.
- Validate the payload into TransfersPage (strict methods raise FeedError).
- Offer the soft surface (fetch_page / fetch_total_count) that logs and
  returns empty results instead of raising.

No caching: every call is one HTTP round trip with a bounded timeout.
"""

from __future__ import annotations

from typing import Any

import httpx

from filsync.config.env import DEFAULT_FILFOX_API, DEFAULT_REQUEST_TIMEOUT_SEC, MAX_PAGE_SIZE
from filsync.core.exceptions import FeedError, FeedFormatError, FeedTransportError
from filsync.feed.models import RawTransfer, TransfersPage
from filsync.filsync_logging import get_logger

logger = get_logger(__name__)

USER_AGENT = "filsync/0.1"


class FilfoxClient:
    """
    Blocking client for `GET /address/{account}/transfers`.

    Use as a context manager, or call close(), when the client owns its
    httpx.Client. An injected http_client is left open for its owner.
    """

    def __init__(
        self,
        api_base: str = DEFAULT_FILFOX_API,
        *,
        timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not api_base.strip():
            raise ValueError("api_base must be non-empty")
        if timeout_sec <= 0:
            raise ValueError("timeout_sec must be positive")
        self._api_base = api_base.strip().rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=httpx.Timeout(timeout_sec),
            headers={"User-Agent": USER_AGENT},
        )

    def __enter__(self) -> "FilfoxClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    # --- Strict surface: typed errors ---

    def get_page(self, account: str, page_index: int, page_size: int) -> TransfersPage:
        """Fetch and validate one page; raise FeedTransportError or FeedFormatError."""
        if page_index < 0:
            raise ValueError("page_index must be >= 0")
        if not (1 <= page_size <= MAX_PAGE_SIZE):
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        data = self._get_json(account, {"page": page_index, "pageSize": page_size})
        try:
            page = TransfersPage.from_response(data, account=account)
        except FeedFormatError as e:
            e.account = account
            raise
        logger.debug(
            "feed_page_fetched",
            account=account,
            page=page_index,
            page_size=page_size,
            received=len(page.transfers),
            skipped=page.skipped,
            total_count=page.total_count,
        )
        return page

    def get_total_count(self, account: str) -> int:
        """Return totalCount for the account; raise FeedError on failure."""
        data = self._get_json(account, {"page": 0, "pageSize": 1})
        total = data.get("totalCount") if isinstance(data, dict) else None
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            raise FeedFormatError(
                f"totalCount must be a non-negative integer, got {total!r}", account=account
            )
        logger.debug("feed_total_count_fetched", account=account, total_count=total)
        return total

    # --- Soft surface: never raises for remote failures ---

    def fetch_page(self, account: str, page_index: int, page_size: int) -> list[RawTransfer]:
        """Transfers on one page, or [] when the feed is unreachable or malformed."""
        try:
            return self.get_page(account, page_index, page_size).transfers
        except FeedError as e:
            logger.error(
                "feed_page_failed",
                account=account,
                page=page_index,
                page_size=page_size,
                error=str(e),
                error_kind=type(e).__name__,
            )
            return []

    def fetch_total_count(self, account: str) -> int:
        """Remote transfer count, or 0 when the feed is unreachable or malformed."""
        try:
            return self.get_total_count(account)
        except FeedError as e:
            logger.error(
                "feed_total_count_failed",
                account=account,
                error=str(e),
                error_kind=type(e).__name__,
            )
            return 0

    def _get_json(self, account: str, params: dict[str, Any]) -> Any:
        url = f"{self._api_base}/address/{account}/transfers"
        try:
            resp = self._client.get(url, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FeedTransportError(
                f"HTTP {e.response.status_code} from {url}", account=account
            ) from e
        except httpx.HTTPError as e:
            raise FeedTransportError(f"request to {url} failed: {e}", account=account) from e
        try:
            return resp.json()
        except ValueError as e:
            raise FeedFormatError(f"response from {url} is not JSON", account=account) from e
