"""
Structured JSON logging: timestamp, level, event_type, account context.

structlog with ISO timestamps and consistent keys so sync passes can be
followed in log aggregation. All modules use get_logger() and log a snake_case
event name plus keyword context (account=..., page=...).

Uses only Python stdlib logging and structlog; no filsync imports to avoid circular imports.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

# JSON output for production (LOG_FORMAT=json); human-readable for local
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()


def _level_from_env() -> int:
    raw = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    return getattr(logging, raw, logging.INFO)


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Ensure timestamp is always present (ISO 8601)."""
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Rename structlog 'event' to event_type for consistency; keep message if present."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def configure_logging(debug: bool = False, log_format: str | None = None) -> None:
    """
    Configure structlog: JSON or console renderer, timestamp, level, event_type.

    debug=True forces DEBUG level; otherwise LOG_LEVEL (default INFO) applies.
    Safe to call again, e.g. from the CLI once settings are known.
    """
    level = logging.DEBUG if debug else _level_from_env()
    fmt = (log_format or LOG_FORMAT).strip().lower()
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
        _normalize_event,
    ]
    if fmt == "json":
        shared_processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        shared_processors.append(
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        )
    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


# One-time configuration on first import
if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> Any:
    """
    Return a structured logger for the given module name.

    The logger is bound lazily, so a later configure_logging() (debug toggle)
    still applies to module-level loggers created at import time:
        logger = get_logger(__name__)
        logger.info("sync_page_stored", account=addr, page=3, inserted=100)
    Output (JSON): {"event_type": "sync_page_stored", "account": "...", "page": 3, "inserted": 100,
    "timestamp": "...", "level": "info", "logger_name": "module.name"}
    """
    return structlog.get_logger(name, logger_name=name)


def bind_account(account: str) -> Any:
    """Return a logger with account bound to all subsequent log calls."""
    return get_logger("filsync").bind(account=account)
