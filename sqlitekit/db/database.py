"""Core database connection: lazy SQLite handle, typed binding, transactions."""

from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Generator, Iterable, Mapping, Optional, Protocol, Sequence, TypeVar, Union

from sqlitekit.config import DatabaseConfig, get_database_config
from sqlitekit.db.errors import DatabaseError
from sqlitekit.redact import redact_params

T = TypeVar("T")

Params = Union[Sequence[Any], Mapping[Any, Any], None]

_BLOB_TYPES = (bytes, bytearray, memoryview)


class Logger(Protocol):
    """Anything shaped like :class:`logging.Logger` (``extra`` / ``exc_info`` kwargs)."""

    def info(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...

    def error(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...


# -- parameter binding ---------------------------------------------------------

def bind_value(value: Any) -> Any:
    """Map a Python value onto the SQLite storage class it binds as."""
    # bool first: it is an int subclass but binds as 0/1
    if isinstance(value, bool):
        return int(value)
    if value is None:
        return None
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    if isinstance(value, _BLOB_TYPES):
        return bytes(value)
    return str(value)


def bind_params(params: Params) -> Union[tuple[Any, ...], dict[str, Any]]:
    """
    Normalise a parameter set for ``sqlite3``.

    * sequence -> positional (``?``)
    * mapping with str keys -> named (``:name``); a leading ``:`` is stripped
    * mapping with int keys -> positional, key ``k`` binds placeholder ``k + 1``

    Raises ``ValueError`` for shapes sqlite3 cannot bind.
    """
    if params is None:
        return ()
    if isinstance(params, Mapping):
        keys = list(params)
        int_keys = [k for k in keys if isinstance(k, int)]
        if int_keys and len(int_keys) != len(keys):
            raise ValueError("Cannot mix positional and named parameters")
        if int_keys:
            ordered = sorted(int_keys)
            if ordered != list(range(len(ordered))):
                raise ValueError(f"Positional parameter keys must be 0..{len(ordered) - 1}, got {ordered}")
            return tuple(bind_value(params[k]) for k in ordered)
        return {str(k).lstrip(":"): bind_value(v) for k, v in params.items()}
    if isinstance(params, (str, bytes)):
        raise ValueError("Parameters must be a sequence or a mapping, not a single string")
    return tuple(bind_value(v) for v in params)


class Database:
    """
    SQLite database wrapper with a lazily opened connection.

    The file must already exist: nothing is created on disk. The connection
    runs in autocommit mode, so the only transactions are the explicit ones
    opened through ``begin_transaction()`` / ``transaction()`` /
    ``run_in_transaction()``.

    Transactions do not nest. SQLite rejects ``BEGIN`` while a transaction is
    open; that error surfaces as :class:`DatabaseError` from the inner call.

    Without *config*, settings come from the environment; *path* overrides
    the configured path.
    """

    def __init__(
        self,
        path: Optional[Path | str] = None,
        logger: Optional[Logger] = None,
        config: Optional[DatabaseConfig] = None,
    ):
        if config is None:
            config = get_database_config()
            if path is not None:
                config = replace(config, path=Path(path))
        self._path = Path(path) if path is not None else config.path
        self._config = config
        self._logger = logger
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    # -- connection lifecycle --------------------------------------------------

    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = self._connect()
        return self._conn

    def _connect(self) -> sqlite3.Connection:
        if not self._path.is_file():
            message = f"SQLite database file does not exist: {self._path}"
            self._log("error", message)
            raise DatabaseError(message)
        if not os.access(self._path, os.R_OK):
            message = f"SQLite database file is not readable: {self._path}"
            self._log("error", message)
            raise DatabaseError(message)

        conn: Optional[sqlite3.Connection] = None
        try:
            conn = sqlite3.connect(
                str(self._path),
                timeout=self._config.timeout,
                detect_types=0,
                isolation_level=None,
                check_same_thread=self._config.check_same_thread,
            )
            conn.row_factory = sqlite3.Row
            if self._config.foreign_keys:
                conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as exc:
            if conn is not None:
                conn.close()
            self._log("error", f"Failed to connect to SQLite database: {exc}", exc_info=True)
            raise DatabaseError(str(exc)) from exc

        self._log("info", f"Connected to SQLite database: {self._path}")
        return conn

    def close(self) -> None:
        """Close the connection if open. Later calls reconnect lazily."""
        if self._conn is not None:
            conn, self._conn = self._conn, None
            conn.close()
            self._log("info", "SQLite database connection closed.")

    # -- low-level query helpers -----------------------------------------------

    def execute(self, query: str, params: Params = ()) -> int:
        """Run INSERT/UPDATE/DELETE/DDL; return the affected row count."""
        with self._reraise("Execute query failed", query, params):
            cursor = self._run(query, params)
            # sqlite3 reports -1 for statements that touch no rows (DDL)
            return max(cursor.rowcount, 0)

    def execute_many(self, query: str, params_seq: Iterable[Params]) -> int:
        """Run *query* once per parameter set; return the total affected rows."""
        params_list = list(params_seq)
        with self._reraise("Execute many failed", query, params_list):
            bound = [self._bind(query, p) for p in params_list]
            cursor = self.connection().executemany(query, bound)
            return max(cursor.rowcount, 0)

    def fetch_one(self, query: str, params: Params = ()) -> Optional[dict[str, Any]]:
        with self._reraise("Fetch one failed", query, params):
            row = self._run(query, params).fetchone()
        return dict(row) if row is not None else None

    def fetch_all(self, query: str, params: Params = ()) -> list[dict[str, Any]]:
        with self._reraise("Fetch all failed", query, params):
            rows = self._run(query, params).fetchall()
        return [dict(r) for r in rows]

    def fetch_scalar(self, query: str, params: Params = (), column_index: int = 0) -> Optional[Any]:
        """Value of column *column_index* (0-based) in the first row, or None."""
        with self._reraise("Fetch scalar failed", query, params):
            row = self._run(query, params).fetchone()
        if row is None:
            return None
        if not 0 <= column_index < len(row):
            message = f"Column index {column_index} out of range for a row of {len(row)} column(s)"
            self._log("error", f"Fetch scalar failed: {message}", query=query, params=redact_params(params))
            raise DatabaseError(message, query=query, params=params)
        return row[column_index]

    # -- transaction helpers ---------------------------------------------------

    def begin_transaction(self) -> bool:
        with self._reraise("Begin transaction failed", "BEGIN", None):
            self.connection().execute("BEGIN")
        return True

    def commit(self) -> bool:
        with self._reraise("Commit failed", "COMMIT", None):
            self.connection().execute("COMMIT")
        return True

    def rollback(self) -> bool:
        with self._reraise("Rollback failed", "ROLLBACK", None):
            self.connection().execute("ROLLBACK")
        return True

    @property
    def in_transaction(self) -> bool:
        return self._conn is not None and self._conn.in_transaction

    @contextmanager
    def transaction(self) -> Generator[Database, None, None]:
        """Commits on success, rolls back and re-raises on any exception."""
        self.begin_transaction()
        try:
            yield self
            self.commit()
        except BaseException as exc:
            self._abort()
            self._log("error", f"Transaction failed: {exc}", exc_info=True)
            raise

    def run_in_transaction(self, work: Callable[[Database], T]) -> T:
        """Run ``work(self)`` inside a transaction and return its result."""
        with self.transaction():
            return work(self)

    def _abort(self) -> None:
        if not self.in_transaction:
            return
        try:
            self.rollback()
        except DatabaseError:
            # rollback() has logged it; the caller re-raises the original failure
            pass

    # -- catalog / identity ----------------------------------------------------

    def table_exists(self, table_name: str) -> bool:
        row = self.fetch_one(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ? LIMIT 1",
            (table_name,),
        )
        return row is not None

    def last_insert_id(self) -> str:
        """Rowid of the most recent successful INSERT on this connection."""
        value = self.fetch_scalar("SELECT last_insert_rowid()")
        return str(value)

    # -- internal --------------------------------------------------------------

    def _bind(self, query: str, params: Params) -> Union[tuple[Any, ...], dict[str, Any]]:
        safe = redact_params(params)
        self._log("debug", f"Preparing query: {query} | params={safe!r}", query=query, params=safe)
        try:
            return bind_params(params)
        except ValueError as exc:
            self._log("error", f"Parameter binding failed: {exc}", query=query, params=safe)
            raise DatabaseError(str(exc), query=query, params=params) from exc

    def _run(self, query: str, params: Params) -> sqlite3.Cursor:
        bound = self._bind(query, params)
        return self.connection().execute(query, bound)

    @contextmanager
    def _reraise(self, label: str, query: str, params: Any) -> Generator[None, None, None]:
        """Log engine and binding errors and re-raise them as DatabaseError."""
        try:
            yield
        except DatabaseError:
            raise
        except (sqlite3.Error, OverflowError, ValueError) as exc:
            # out-of-range ints and unencodable strings fail in the driver's binder
            self._log(
                "error",
                f"{label}: {exc}",
                query=query,
                params=redact_params(params),
                exc_info=True,
            )
            raise DatabaseError(str(exc), query=query, params=params) from exc

    def _log(self, level: str, message: str, exc_info: bool = False, **context: Any) -> None:
        if self._logger is None:
            return
        getattr(self._logger, level)(message, extra=context or None, exc_info=exc_info)
