"""
Test that filsync_logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from filsync_logging and use the logger."""
    from filsync.filsync_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")


def test_processors_rename_event_and_add_timestamp():
    from filsync.filsync_logging.logger import _add_timestamp, _normalize_event

    event = _normalize_event(None, "info", {"event": "sync_page_stored", "page": 3})
    event = _add_timestamp(None, "info", event)

    assert event["event_type"] == "sync_page_stored"
    assert event["message"] == "sync_page_stored"
    assert "event" not in event
    assert event["page"] == 3
    assert "T" in event["timestamp"]


def test_bind_account_keeps_context():
    from filsync.filsync_logging import bind_account

    log = bind_account("f01234").bind(page=1)
    log.info("sync_page_stored")


def test_module_logger_carries_its_name():
    from structlog.testing import capture_logs

    from filsync.filsync_logging import get_logger

    with capture_logs() as logs:
        get_logger("filsync.sync.engine").info("sync_delta", needed=3)

    assert logs == [
        {"event": "sync_delta", "needed": 3, "logger_name": "filsync.sync.engine", "log_level": "info"}
    ]
