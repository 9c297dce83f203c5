"""
Core cross-cutting pieces shared by the feed client, stores and engine.
"""

from filsync.core.exceptions import (
    ConfigurationError,
    FeedError,
    FeedFormatError,
    FeedTransportError,
    FilsyncError,
    PersistenceError,
)

__all__ = [
    "ConfigurationError",
    "FeedError",
    "FeedFormatError",
    "FeedTransportError",
    "FilsyncError",
    "PersistenceError",
]
