"""
Transfer normalizer: raw Filfox entries to TransferRecord rows.

attoFIL strings can exceed 64-bit range, so values are parsed as Python ints
and converted with an explicit high-precision decimal context. Unparseable
values come back as None from parse_atto/atto_to_fil; to_decimal keeps the
zero-on-failure contract for callers that only want a number.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, localcontext
from typing import Any

from filsync.database.models import (
    DIRECTION_IN,
    DIRECTION_OUT,
    UNKNOWN_TYPE,
    TransferRecord,
)
from filsync.feed.models import RawTransfer

ATTO_PER_FIL = 10**18
FIL_DECIMALS = 18
# Enough digits for any DECIMAL(36,18) plus headroom
_DECIMAL_PRECISION = 80

_INTEGER_RE = re.compile(r"^[+-]?\d+$")


def parse_atto(raw: Any) -> int | None:
    """
    Parse an attoFIL amount; return its absolute value or None.

    The explorer reports outgoing transfers with a leading minus sign; the
    ledger stores magnitudes and keeps the sign in `direction`.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return abs(raw)
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if not _INTEGER_RE.match(text):
        return None
    return abs(int(text))


def atto_to_fil(raw: Any) -> Decimal | None:
    """Convert attoFIL to FIL exactly: whole + (value mod 10^18) / 10^18. None if unparseable."""
    atto = parse_atto(raw)
    if atto is None:
        return None
    whole, frac = divmod(atto, ATTO_PER_FIL)
    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PRECISION
        return Decimal(whole) + Decimal(frac).scaleb(-FIL_DECIMALS)


def to_decimal(raw: Any) -> Decimal:
    """attoFIL to FIL; Decimal(0) when the input cannot be parsed."""
    value = atto_to_fil(raw)
    return value if value is not None else Decimal(0)


def transfer_id(raw: RawTransfer) -> str:
    """
    Deterministic row id from immutable remote fields only.

    The absolute value is used so the same transfer seen from the sender's
    feed (negative value) and the receiver's feed maps to one id.
    """
    atto = parse_atto(raw.value)
    parts = (
        raw.message or "",
        str(raw.height),
        str(raw.timestamp),
        raw.type or UNKNOWN_TYPE,
        raw.from_addr,
        raw.to_addr,
        str(atto) if atto is not None else raw.value.strip(),
    )
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()


def to_utc_datetime(unix_seconds: int | float) -> datetime:
    """Unix seconds to naive UTC datetime truncated to milliseconds."""
    dt = datetime.fromtimestamp(unix_seconds, tz=timezone.utc).replace(tzinfo=None)
    return dt.replace(microsecond=(dt.microsecond // 1000) * 1000)


@dataclass(frozen=True)
class NormalizedTransfer:
    """A TransferRecord plus whether its value parsed cleanly."""

    record: TransferRecord
    value_ok: bool


def normalize_transfer(raw: RawTransfer, account: str) -> NormalizedTransfer:
    """Build the ledger row for one feed entry as seen from `account`."""
    amount = atto_to_fil(raw.value)
    record = TransferRecord(
        id=transfer_id(raw),
        from_addr=raw.from_addr,
        to_addr=raw.to_addr,
        amount=amount if amount is not None else Decimal(0),
        height=raw.height,
        direction=DIRECTION_OUT if raw.from_addr == account else DIRECTION_IN,
        timestamp=to_utc_datetime(raw.timestamp),
        type=raw.type or UNKNOWN_TYPE,
    )
    return NormalizedTransfer(record=record, value_ok=amount is not None)
