"""
Structured logging for filsync.

JSON logs with timestamp, level, event_type and account context.
"""

from filsync.filsync_logging.logger import bind_account, configure_logging, get_logger

__all__ = ["bind_account", "configure_logging", "get_logger"]
