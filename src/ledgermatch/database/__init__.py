"""Database layer for ledgermatch."""

from ledgermatch.database.base import Database
from ledgermatch.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
