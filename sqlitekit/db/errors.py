"""Error type raised by the database layer."""

from __future__ import annotations

import sqlite3
from typing import Any, Optional


class DatabaseError(sqlite3.Error):
    """
    Every failure surfaced by :mod:`sqlitekit.db`.

    Engine failures keep the driver's message; the original ``sqlite3``
    exception is available as ``__cause__``.
    """

    def __init__(self, message: str, query: Optional[str] = None, params: Any = None):
        super().__init__(message)
        self.query = query
        self.params = params
