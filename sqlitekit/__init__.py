"""sqlitekit — thin access layer over a single SQLite database file."""

from sqlitekit.db import Database, DatabaseError, Repository

__all__ = ["Database", "DatabaseError", "Repository"]

__version__ = "0.1.0"
