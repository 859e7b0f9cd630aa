"""SQLite database engine and schema via SQLAlchemy Core."""

from itemctl.infrastructure.database.engine import create_db_engine, init_database
from itemctl.infrastructure.database.schema import items, metadata

__all__ = [
    "create_db_engine",
    "init_database",
    "items",
    "metadata",
]
