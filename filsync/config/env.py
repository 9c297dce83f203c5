"""
Environment variable loading and validation for filsync.

- ADDRESSES: comma-separated Filecoin accounts to mirror (required)
- FILFOX_API: explorer base URL (default: https://filfox.info/api/v1)
- DATABASE_URL: SQLAlchemy URL; wins over the MYSQL_* variables
- MYSQL_HOST / MYSQL_PORT / MYSQL_USER / MYSQL_PASSWORD / MYSQL_DB: MySQL via PyMySQL
- FILSYNC_DB_PATH: SQLite file used when no server database is configured
- PAGE_SIZE, REQUEST_TIMEOUT, DEBUG
- Loads .env from the working directory (or a parent) when available.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from dotenv import find_dotenv, load_dotenv
from sqlalchemy.engine import URL

from filsync.core.exceptions import ConfigurationError

DEFAULT_FILFOX_API = "https://filfox.info/api/v1"
DEFAULT_SQLITE_PATH = "filsync.db"
DEFAULT_PAGE_SIZE = 100
# Filfox rejects larger pages
MAX_PAGE_SIZE = 100
DEFAULT_REQUEST_TIMEOUT_SEC = 20.0

_TRUTHY = ("1", "true", "yes", "on")


def load_filsync_env() -> None:
    """Load .env into os.environ without overriding existing variables. Safe to call multiple times."""
    load_dotenv(find_dotenv(usecwd=True))


def _get(environ: Mapping[str, str], name: str) -> str:
    return (environ.get(name) or "").strip()


def get_addresses(environ: Mapping[str, str]) -> list[str]:
    """Return watched accounts from ADDRESSES; raise ConfigurationError when none are set."""
    raw = _get(environ, "ADDRESSES")
    addresses: list[str] = []
    for part in raw.split(","):
        addr = part.strip()
        if addr and addr not in addresses:
            addresses.append(addr)
    if not addresses:
        raise ConfigurationError("ADDRESSES must list at least one account (comma-separated)")
    return addresses


def get_api_base(environ: Mapping[str, str]) -> str:
    return (_get(environ, "FILFOX_API") or DEFAULT_FILFOX_API).rstrip("/")


def get_database_url(environ: Mapping[str, str]) -> str:
    """
    Resolve the database URL.
    Order: DATABASE_URL > MYSQL_HOST (+ MYSQL_*) > SQLite at FILSYNC_DB_PATH.
    """
    url = _get(environ, "DATABASE_URL")
    if url:
        return url
    host = _get(environ, "MYSQL_HOST")
    if host:
        port_raw = _get(environ, "MYSQL_PORT")
        try:
            port = int(port_raw) if port_raw else None
        except ValueError as e:
            raise ConfigurationError(f"MYSQL_PORT must be an integer, got {port_raw!r}") from e
        database = _get(environ, "MYSQL_DB")
        if not database:
            raise ConfigurationError("MYSQL_DB is required when MYSQL_HOST is set")
        return URL.create(
            "mysql+pymysql",
            username=_get(environ, "MYSQL_USER") or None,
            password=environ.get("MYSQL_PASSWORD") or None,
            host=host,
            port=port,
            database=database,
            query={"charset": "utf8mb4"},
        ).render_as_string(hide_password=False)
    path = _get(environ, "FILSYNC_DB_PATH") or DEFAULT_SQLITE_PATH
    return f"sqlite:///{path}"


def get_page_size(environ: Mapping[str, str]) -> int:
    raw = _get(environ, "PAGE_SIZE")
    if not raw:
        return DEFAULT_PAGE_SIZE
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"PAGE_SIZE must be an integer, got {raw!r}") from e
    if not (1 <= value <= MAX_PAGE_SIZE):
        raise ConfigurationError(f"PAGE_SIZE must be between 1 and {MAX_PAGE_SIZE}")
    return value


def get_request_timeout(environ: Mapping[str, str]) -> float:
    raw = _get(environ, "REQUEST_TIMEOUT")
    if not raw:
        return DEFAULT_REQUEST_TIMEOUT_SEC
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"REQUEST_TIMEOUT must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError("REQUEST_TIMEOUT must be positive")
    return value


def is_debug(environ: Mapping[str, str]) -> bool:
    """Return True if DEBUG is set to a truthy value."""
    return _get(environ, "DEBUG").lower() in _TRUTHY


def current_environ() -> Mapping[str, str]:
    """Process environment after .env has been loaded."""
    load_filsync_env()
    return os.environ
