"""Store factory functions for creating local store instances."""

import os
from pathlib import Path
from typing import Optional

from cartsync.database.sqlalchemy_db import SQLAlchemyStore


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemyStore:
    """Create a SQLite-backed local store.

    Args:
        database_path: Path to SQLite database file. If None, checks CARTSYNC_DB_PATH
            environment variable, then defaults to ~/.cartsync/cartsync.db

    Returns:
        SQLAlchemyStore instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("CARTSYNC_DB_PATH")

    if database_path is None:
        # Default to ~/.cartsync/cartsync.db
        home = Path.home()
        db_dir = home / ".cartsync"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "cartsync.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyStore(database_url)
