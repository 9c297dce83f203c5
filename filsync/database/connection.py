"""
Database connection and session management.

Responsibilities:
- Create the SQLAlchemy engine from a URL (MySQL via PyMySQL in production,
  SQLite for local runs and tests).
- Provide session_scope(): commit on success, roll back on error, always close.
- Create the fil_transfers / fil_last_count tables when missing.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from filsync.database.tables import Base
from filsync.filsync_logging import get_logger

logger = get_logger(__name__)


class Database:
    """Engine plus session factory for one database URL."""

    def __init__(self, url: str) -> None:
        parsed = make_url(url)
        connect_args: dict[str, Any] = {}
        if parsed.get_backend_name() == "sqlite":
            connect_args["check_same_thread"] = False
            if parsed.database and parsed.database != ":memory:":
                Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
        self._engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)
        logger.debug("database_engine_created", url=parsed.render_as_string(hide_password=True))

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Context manager for a single session. Commits on success, rolls back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ensure_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        Base.metadata.create_all(self._engine)

    def dispose(self) -> None:
        self._engine.dispose()


def get_database(url: str) -> Database:
    """Return a Database for the URL with its schema created."""
    db = Database(url)
    db.ensure_schema()
    return db
