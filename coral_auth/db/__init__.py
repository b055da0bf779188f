"""Database module."""

from coral_auth.db.database import Database, get_db

__all__ = [
    "Database",
    "get_db",
]
