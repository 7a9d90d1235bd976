#!/usr/bin/env python3
"""Walk a Repository through create / read / update / delete on a ``users`` table."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sqlitekit.config import get_db_path
from sqlitekit.db import Database, DatabaseError, Repository

USERS_DDL = """CREATE TABLE IF NOT EXISTS users (
    id       INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL,
    email    TEXT NOT NULL,
    status   TEXT NOT NULL DEFAULT 'active'
)"""


def main():
    parser = argparse.ArgumentParser(description="sqlitekit repository walkthrough")
    parser.add_argument("--db-path", type=str, help="Override database path")
    parser.add_argument("--verbose", action="store_true", help="Log every prepared query")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger = logging.getLogger("sqlitekit.example")

    db_path = Path(args.db_path) if args.db_path else get_db_path()
    # Database never creates the file itself
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db_path.touch(exist_ok=True)

    db = Database(db_path, logger=logger)
    db.execute(USERS_DDL)
    users = Repository(db, "users", "id")

    user_id = users.create({"username": "john_doe", "email": "john@example.com", "status": "active"})
    user = users.find(user_id)
    if user is not None:
        print(f"User found: {user['username']}")

    try:
        print(f"Found via find_or_fail: {users.find_or_fail(user_id)['username']}")
    except DatabaseError as e:
        print(e)

    print(f"Rows updated: {users.update(user_id, {'status': 'inactive'})}")
    print(f"Total users: {len(users.all())}")
    print(f"Rows deleted: {users.delete(user_id)}")

    db.close()
    print("Done.")


if __name__ == "__main__":
    main()
