"""Database package."""

from nextcut.database.session import (
    engine,
    SessionLocal,
    create_db_engine,
    get_db_context,
    get_db,
    run_atomic,
    translate_store_error,
    create_all_tables,
    drop_all_tables,
)

__all__ = [
    "engine",
    "SessionLocal",
    "create_db_engine",
    "get_db_context",
    "get_db",
    "run_atomic",
    "translate_store_error",
    "create_all_tables",
    "drop_all_tables",
]
