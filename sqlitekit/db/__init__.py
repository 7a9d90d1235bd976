"""Database layer — lazy SQLite connection, transactions and a generic repository."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Optional

from sqlitekit.config import get_database_config
from sqlitekit.db.database import Database, Logger, bind_params, bind_value
from sqlitekit.db.errors import DatabaseError
from sqlitekit.db.repository import Repository, quote_identifier

__all__ = [
    "Database",
    "DatabaseError",
    "Logger",
    "Repository",
    "bind_params",
    "bind_value",
    "get_db",
    "quote_identifier",
    "reset_db",
]


# -- module singleton ----------------------------------------------------------

_default_db: Optional[Database] = None


def get_db(path: Optional[Path | str] = None, logger: Optional[Logger] = None) -> Database:
    """Return the module-level Database, built from the environment on first use."""
    global _default_db
    if _default_db is None:
        config = get_database_config()
        if path is not None:
            config = replace(config, path=Path(path))
        _default_db = Database(logger=logger, config=config)
    return _default_db


def reset_db() -> None:
    """Close and discard the singleton (useful in tests)."""
    global _default_db
    if _default_db is not None:
        _default_db.close()
        _default_db = None
