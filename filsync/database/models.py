"""
Domain models for database entities.

Mirrored transfers, sync checkpoints and ledger totals. Used by the store
layer and the reconciliation engine; ORM classes live in tables.py.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

DIRECTION_IN = "in"
DIRECTION_OUT = "out"
UNKNOWN_TYPE = "unknown"


class Role(str, Enum):
    """Which side of a transfer an account is matched on in aggregate queries."""

    RECIPIENT = "recipient"
    SENDER = "sender"


@dataclass(frozen=True)
class TransferRecord:
    """Single normalized transfer row."""

    id: str
    """Deterministic id derived from remote fields (see normalizer.transfer_id)."""
    from_addr: str
    to_addr: str
    amount: Decimal
    """Value in FIL, non-negative."""
    height: int
    direction: str
    """'out' when the watched account is the sender, else 'in'."""
    timestamp: datetime
    """Naive UTC, millisecond precision."""
    type: str = UNKNOWN_TYPE


@dataclass(frozen=True)
class SyncCheckpoint:
    """Last remote transfer count known to be mirrored for an account."""

    account: str
    last_known_remote_count: int


@dataclass(frozen=True)
class AccountTotals:
    """Ledger-derived totals for one account."""

    account: str
    received: Decimal
    sent: Decimal
    rewards: Decimal
    burned: Decimal
    day: date
    rewards_on_day: Decimal
    rewards_previous_day: Decimal

    def to_dict(self) -> dict[str, str]:
        return {
            "account": self.account,
            "received": str(self.received),
            "sent": str(self.sent),
            "rewards": str(self.rewards),
            "burned": str(self.burned),
            "day": self.day.isoformat(),
            "rewards_on_day": str(self.rewards_on_day),
            "rewards_previous_day": str(self.rewards_previous_day),
        }
