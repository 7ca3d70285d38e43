"""Local record store for cartsync."""

from cartsync.database.base import LocalStore
from cartsync.database.factories import create_sqlite_store

__all__ = ["LocalStore", "create_sqlite_store"]
