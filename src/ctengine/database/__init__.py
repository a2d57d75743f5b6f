"""Database layer for ctengine."""

from ctengine.database.base import Database
from ctengine.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
