from textile_pos.database.base import Base
from textile_pos.database.engine import create_database_engine, ensure_sqlite_schema
from textile_pos.database.session import Database, get_db, init_database

__all__ = [
    "Base",
    "Database",
    "create_database_engine",
    "ensure_sqlite_schema",
    "get_db",
    "init_database",
]
