"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from ctengine.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks CTENGINE_DB_PATH
            environment variable, then defaults to ~/.ctengine/ctengine.db.
            The special value ":memory:" gives a throwaway in-memory database.

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("CTENGINE_DB_PATH")

    if database_path is None:
        db_dir = Path.home() / ".ctengine"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "ctengine.db")

    if database_path == ":memory:":
        return SQLAlchemyDatabase("sqlite://")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)
