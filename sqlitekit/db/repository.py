"""Generic table repository — CRUD keyed by a primary-key column."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from sqlitekit.db.database import Database
from sqlitekit.db.errors import DatabaseError

# Placeholder for the key; data columns bind as c0, c1, ... so they can
# never collide with it, whatever the column names are.
_PK_PARAM = "pk"


def quote_identifier(identifier: str) -> str:
    """``users`` -> ``"users"``; embedded double quotes are doubled."""
    return '"' + identifier.replace('"', '""') + '"'


def _column_params(data: Mapping[str, Any]) -> list[tuple[str, str, Any]]:
    """(quoted column, placeholder name, value) for every item in *data*."""
    return [
        (quote_identifier(str(column)), f"c{i}", value)
        for i, (column, value) in enumerate(data.items())
    ]


class Repository:
    """
    CRUD over one table through a shared :class:`Database`.

    The repository never owns the connection; closing is the caller's job.
    """

    def __init__(self, db: Database, table: str, primary_key: str = "id"):
        self._db = db
        self._table = table
        self._primary_key = primary_key

    @property
    def table(self) -> str:
        return self._table

    @property
    def primary_key(self) -> str:
        return self._primary_key

    # -- Create ----------------------------------------------------------------

    def create(self, data: Mapping[str, Any]) -> int:
        """Insert *data* as one row; return the new rowid."""
        if not data:
            raise DatabaseError("Cannot create with empty data array.")

        columns = _column_params(data)
        sql = "INSERT INTO {} ({}) VALUES ({})".format(
            quote_identifier(self._table),
            ", ".join(col for col, _, _ in columns),
            ", ".join(f":{name}" for _, name, _ in columns),
        )
        self._db.execute(sql, {name: value for _, name, value in columns})
        return int(self._db.last_insert_id())

    # -- Read ------------------------------------------------------------------

    def find(self, id: Any) -> Optional[dict[str, Any]]:
        sql = "SELECT * FROM {} WHERE {} = :{} LIMIT 1".format(
            quote_identifier(self._table),
            quote_identifier(self._primary_key),
            _PK_PARAM,
        )
        return self._db.fetch_one(sql, {_PK_PARAM: id})

    def find_or_fail(self, id: Any) -> dict[str, Any]:
        record = self.find(id)
        if record is None:
            raise DatabaseError(
                f"No record found in table [{self._table}] with [{self._primary_key} = {id}]"
            )
        return record

    def all(self) -> list[dict[str, Any]]:
        return self._db.fetch_all(f"SELECT * FROM {quote_identifier(self._table)}")

    # -- Update ----------------------------------------------------------------

    def update(self, id: Any, data: Mapping[str, Any]) -> int:
        """Set every column in *data* on the row with key *id*; return affected rows."""
        if not data:
            raise DatabaseError("Cannot update with empty data array.")

        columns = _column_params(data)
        sql = "UPDATE {} SET {} WHERE {} = :{}".format(
            quote_identifier(self._table),
            ", ".join(f"{col} = :{name}" for col, name, _ in columns),
            quote_identifier(self._primary_key),
            _PK_PARAM,
        )
        params = {name: value for _, name, value in columns}
        params[_PK_PARAM] = id
        return self._db.execute(sql, params)

    # -- Delete ----------------------------------------------------------------

    def delete(self, id: Any) -> int:
        """Delete by key; 0 when no row matched."""
        sql = "DELETE FROM {} WHERE {} = :{}".format(
            quote_identifier(self._table),
            quote_identifier(self._primary_key),
            _PK_PARAM,
        )
        return self._db.execute(sql, {_PK_PARAM: id})
