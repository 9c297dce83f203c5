"""
Application settings.

Responsibilities:
- Load configuration from environment variables and .env files.
- Validate required settings and provide defaults for optional ones.
- Expose typed settings (API base URL, database URL, accounts, paging)
  for the CLI, feed client and reconciliation engine.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from filsync.config import env


@dataclass(frozen=True)
class Settings:
    """Validated runtime configuration."""

    addresses: list[str]
    api_base: str = env.DEFAULT_FILFOX_API
    database_url: str = f"sqlite:///{env.DEFAULT_SQLITE_PATH}"
    page_size: int = env.DEFAULT_PAGE_SIZE
    request_timeout_sec: float = env.DEFAULT_REQUEST_TIMEOUT_SEC
    debug: bool = False

    @property
    def database_url_safe(self) -> str:
        """Database URL without credentials, for logging."""
        return self.database_url.split("@")[-1] if "@" in self.database_url else self.database_url


def get_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Return validated settings.

    environ defaults to os.environ after loading .env. Raises ConfigurationError
    when ADDRESSES is missing or a numeric setting is invalid.
    """
    if environ is None:
        environ = env.current_environ()
    return Settings(
        addresses=env.get_addresses(environ),
        api_base=env.get_api_base(environ),
        database_url=env.get_database_url(environ),
        page_size=env.get_page_size(environ),
        request_timeout_sec=env.get_request_timeout(environ),
        debug=env.is_debug(environ),
    )
