"""
Main entrypoint: one sync pass over the accounts in ADDRESSES.

Env: ADDRESSES (required, comma-separated), FILFOX_API, DATABASE_URL or MYSQL_*,
PAGE_SIZE, REQUEST_TIMEOUT, DEBUG.

Periodic mode: python main.py sync --interval 600
"""

from filsync.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
