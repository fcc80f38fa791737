"""SQLite engine and schema via SQLAlchemy Core."""

from obzctl.infrastructure.database.engine import create_db_engine, init_database
from obzctl.infrastructure.database.schema import boards, metadata, obzs

__all__ = [
    "boards",
    "create_db_engine",
    "init_database",
    "metadata",
    "obzs",
]
