"""Database engine setup for SQLite with WAL mode.

Processor workers write from several threads at once, so every connection
runs in WAL mode with a busy timeout: concurrent writers queue on the
database lock instead of failing with ``database is locked``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from itemctl.infrastructure.database.schema import metadata

DEFAULT_BUSY_TIMEOUT = 30.0


def create_db_engine(db_path: Path, *, busy_timeout: float = DEFAULT_BUSY_TIMEOUT) -> Engine:
    """Create a SQLite engine with WAL mode, usable from worker threads."""
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"timeout": busy_timeout, "check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout * 1000)}")
        cursor.close()

    return engine


def init_database(db_path: Path, *, busy_timeout: float = DEFAULT_BUSY_TIMEOUT) -> Engine:
    """Initialize the database at *db_path*, creating parent directories and tables.

    Idempotent — safe to call on an existing database.

    Returns the engine ready for use.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path, busy_timeout=busy_timeout)
    metadata.create_all(engine)
    return engine
