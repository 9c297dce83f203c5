"""
Tests for the filsync CLI entrypoint (no network: the feed client is patched).
"""

from __future__ import annotations

import httpx

from conftest import ONE_FIL, OTHER, WATCHED

from filsync import cli
from filsync.database import LedgerStore, get_database
from filsync.feed.client import FilfoxClient


def _transfer(n: int) -> dict:
    return {
        "height": 2_000_000 + n,
        "timestamp": 1_700_000_000 + n,
        "message": f"bafy2bzacecli{n:04d}",
        "from": "f1counterparty",
        "to": WATCHED,
        "value": str(ONE_FIL),
        "type": "receive",
    }


def _handler(request: httpx.Request) -> httpx.Response:
    if OTHER in request.url.path:
        return httpx.Response(500, text="upstream error")
    history = [_transfer(n) for n in (1, 0)]
    page = int(request.url.params["page"])
    size = int(request.url.params["pageSize"])
    return httpx.Response(
        200,
        json={"totalCount": len(history), "transfers": history[page * size:(page + 1) * size]},
    )


def test_missing_addresses_exits_with_error(clean_env):
    assert cli.main(["sync"]) == 1


def test_invalid_page_size_exits_with_error(clean_env):
    assert cli.main(["sync", "--accounts", WATCHED, "--page-size", "500"]) == 1


def test_summary_on_empty_ledger(clean_env, monkeypatch):
    monkeypatch.setenv("FILSYNC_DB_PATH", str(clean_env / "summary.db"))
    assert cli.main(["summary", "--accounts", WATCHED, "--date", "2024-03-01"]) == 0
    assert (clean_env / "summary.db").exists()


def test_sync_pass_survives_one_failing_account(clean_env, monkeypatch):
    db_path = clean_env / "sync.db"
    monkeypatch.setenv("FILSYNC_DB_PATH", str(db_path))
    monkeypatch.setattr(
        cli,
        "FilfoxClient",
        lambda api_base, timeout_sec: FilfoxClient(
            api_base, http_client=httpx.Client(transport=httpx.MockTransport(_handler))
        ),
    )

    assert cli.main(["sync", "--accounts", f"{WATCHED},{OTHER}"]) == 0

    db = get_database(f"sqlite:///{db_path}")
    try:
        ledger = LedgerStore(db)
        assert ledger.count_for_account(WATCHED) == 2
        assert ledger.count_for_account(OTHER) == 0
    finally:
        db.dispose()


def test_signal_install_failure_is_tolerated(monkeypatch):
    import threading

    def refuse(signum, handler):
        raise ValueError("signal only works in main thread")

    monkeypatch.setattr(cli.signal, "signal", refuse)
    stop = threading.Event()

    cli._install_stop_handlers(stop)

    assert stop.is_set() is False
