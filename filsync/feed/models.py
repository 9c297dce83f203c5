"""
Data models for the Filfox transfer feed.

Responsibilities:
- Validate the `/address/{account}/transfers` payload at the boundary.
- Turn a malformed response into FeedFormatError; drop and count malformed
  entries so the rest of the page survives.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from filsync.core.exceptions import FeedFormatError
from filsync.filsync_logging import get_logger

logger = get_logger(__name__)

# 9999-12-31T23:59:59Z; anything larger is not epoch seconds (e.g. milliseconds)
MAX_TIMESTAMP = 253402300799


def _require_int(item: dict[str, Any], key: str, maximum: int | None = None) -> int:
    value = item.get(key)
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise FeedFormatError(f"transfer field {key!r} must be an integer, got bool")
    if isinstance(value, int):
        if value < 0:
            raise FeedFormatError(f"transfer field {key!r} must be non-negative, got {value}")
        if maximum is not None and value > maximum:
            raise FeedFormatError(f"transfer field {key!r} is out of range, got {value}")
        return value
    raise FeedFormatError(f"transfer field {key!r} must be an integer, got {value!r}")


def _require_str(item: dict[str, Any], key: str) -> str:
    value = item.get(key)
    if not isinstance(value, str) or not value.strip():
        raise FeedFormatError(f"transfer field {key!r} must be a non-empty string, got {value!r}")
    return value.strip()


def _optional_str(item: dict[str, Any], key: str) -> str | None:
    value = item.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise FeedFormatError(f"transfer field {key!r} must be a string, got {value!r}")
    return value.strip() or None


@dataclass(frozen=True)
class RawTransfer:
    """
    One entry of the remote `transfers` list, validated but not normalized.

    value is kept as the explorer sent it (attoFIL, possibly signed); the
    normalizer decides what an unparseable value means.
    """

    from_addr: str
    to_addr: str
    value: str
    height: int
    timestamp: int
    """Unix timestamp (seconds)."""
    type: str | None = None
    message: str | None = None
    """Message CID; absent for block rewards."""

    @classmethod
    def from_api_item(cls, item: Any) -> "RawTransfer":
        """Build from a single transfers[] item; raise FeedFormatError on a bad shape."""
        if not isinstance(item, dict):
            raise FeedFormatError(f"transfer entry must be an object, got {type(item).__name__}")
        raw_value = item.get("value")
        if raw_value is None:
            raise FeedFormatError("transfer field 'value' is missing")
        return cls(
            from_addr=_require_str(item, "from"),
            to_addr=_require_str(item, "to"),
            value=str(raw_value),
            height=_require_int(item, "height"),
            timestamp=_require_int(item, "timestamp", maximum=MAX_TIMESTAMP),
            type=_optional_str(item, "type"),
            message=_optional_str(item, "message"),
        )


@dataclass(frozen=True)
class TransfersPage:
    """
    Validated response of one transfers request.

    Entries that fail validation are dropped and counted in `skipped`, so one
    bad entry does not cost the rest of the page. total_count is None when the
    page carries no usable totalCount.
    """

    total_count: int | None
    transfers: list[RawTransfer] = field(default_factory=list)
    skipped: int = 0

    @classmethod
    def from_response(cls, data: Any, account: str | None = None) -> "TransfersPage":
        """Build from the decoded JSON body; raise FeedFormatError when there is no transfers list."""
        if not isinstance(data, dict):
            raise FeedFormatError(f"response must be an object, got {type(data).__name__}")
        items = data.get("transfers")
        if not isinstance(items, list):
            raise FeedFormatError("response is missing the 'transfers' list")
        total = data.get("totalCount")
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            total = None
        transfers: list[RawTransfer] = []
        skipped = 0
        for position, item in enumerate(items):
            try:
                transfers.append(RawTransfer.from_api_item(item))
            except FeedFormatError as e:
                skipped += 1
                logger.warning(
                    "feed_entry_skipped",
                    account=account,
                    position=position,
                    error=str(e),
                )
        return cls(total_count=total, transfers=transfers, skipped=skipped)
