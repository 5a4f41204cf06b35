"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from ledgermatch.database.sqlalchemy_db import SQLAlchemyDatabase


def default_database_path() -> str:
    """Return ~/.ledgermatch/ledgermatch.db, creating the directory."""
    db_dir = Path.home() / ".ledgermatch"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / "ledgermatch.db")


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks LEDGERMATCH_DB_PATH
            environment variable, then defaults to ~/.ledgermatch/ledgermatch.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("LEDGERMATCH_DB_PATH")

    if database_path is None:
        database_path = default_database_path()

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")


def create_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create the configured record store.

    An explicit path wins; otherwise LEDGERMATCH_DATABASE_URL selects any
    SQLAlchemy backend, falling back to SQLite.
    """
    if database_path is None:
        database_url = os.environ.get("LEDGERMATCH_DATABASE_URL")
        if database_url:
            return SQLAlchemyDatabase(database_url)
    return create_sqlite_database(database_path=database_path)
