"""
Filfox transfer feed package.

Fetches paginated transfer history from the explorer, validates it into
typed records, and normalizes attoFIL values for storage.
"""

from filsync.feed.client import FilfoxClient
from filsync.feed.models import RawTransfer, TransfersPage
from filsync.feed.normalizer import (
    NormalizedTransfer,
    atto_to_fil,
    normalize_transfer,
    parse_atto,
    to_decimal,
    transfer_id,
)

__all__ = [
    "FilfoxClient",
    "NormalizedTransfer",
    "RawTransfer",
    "TransfersPage",
    "atto_to_fil",
    "normalize_transfer",
    "parse_atto",
    "to_decimal",
    "transfer_id",
]
