"""
Application-level exceptions.

- ConfigurationError: fatal at startup, the process exits non-zero.
- FeedError and subclasses: remote explorer failures, typed so the engine can
  tell "remote unavailable" apart from "no more data".
- PersistenceError: a batch write was rolled back.
"""

from __future__ import annotations


class FilsyncError(Exception):
    """Base class for all filsync errors."""


class ConfigurationError(FilsyncError):
    """Required setting missing or invalid."""


class FeedError(FilsyncError):
    """The remote transfer feed could not be read."""

    def __init__(self, message: str, *, account: str | None = None) -> None:
        super().__init__(message)
        self.account = account


class FeedTransportError(FeedError):
    """Network failure, timeout, or non-success HTTP status."""


class FeedFormatError(FeedError):
    """Response body did not have the expected shape."""


class PersistenceError(FilsyncError):
    """A database write failed and its transaction was rolled back."""
