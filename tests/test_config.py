"""Tests for environment-driven configuration and the module-level Database."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import sqlitekit.db as db_module
from sqlitekit.config import DatabaseConfig, get_database_config, get_db_path
from sqlitekit.db import Database, get_db, reset_db

_KEYS = ("SQLITEKIT_DB_PATH", "SQLITEKIT_TIMEOUT", "SQLITEKIT_FOREIGN_KEYS", "SQLITEKIT_CHECK_SAME_THREAD")


def _clean_env(**values: str) -> dict:
    env = {k: v for k, v in os.environ.items() if k not in _KEYS}
    env.update(values)
    return env


class TestDatabaseConfig(unittest.TestCase):
    def test_defaults(self):
        with patch.dict(os.environ, _clean_env(), clear=True):
            cfg = get_database_config()
        self.assertEqual(cfg.path, Path.cwd() / "data" / "app.db")
        self.assertEqual(cfg.timeout, 5.0)
        self.assertFalse(cfg.foreign_keys)
        self.assertTrue(cfg.check_same_thread)

    def test_environment_overrides(self):
        env = _clean_env(
            SQLITEKIT_DB_PATH="/tmp/custom.db",
            SQLITEKIT_TIMEOUT="0.5",
            SQLITEKIT_FOREIGN_KEYS="yes",
            SQLITEKIT_CHECK_SAME_THREAD="false",
        )
        with patch.dict(os.environ, env, clear=True):
            cfg = get_database_config()
            self.assertEqual(get_db_path(), Path("/tmp/custom.db"))
        self.assertEqual(cfg, DatabaseConfig(
            path=Path("/tmp/custom.db"), timeout=0.5, foreign_keys=True, check_same_thread=False,
        ))

    def test_invalid_timeout(self):
        with patch.dict(os.environ, _clean_env(SQLITEKIT_TIMEOUT="soon"), clear=True):
            with self.assertRaises(EnvironmentError) as ctx:
                get_database_config()
        self.assertIn("SQLITEKIT_TIMEOUT", str(ctx.exception))

    def test_config_is_frozen(self):
        cfg = DatabaseConfig(path=Path("x.db"))
        with self.assertRaises(Exception):
            cfg.timeout = 1.0  # type: ignore[misc]

    def test_database_uses_config_path_when_no_path_given(self):
        db = Database(config=DatabaseConfig(path=Path("/tmp/from-config.db")))
        self.assertEqual(db.path, Path("/tmp/from-config.db"))
        self.assertFalse(db.is_connected)


    def test_explicit_path_keeps_environment_settings(self):
        tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
        tmp.close()
        env = _clean_env(SQLITEKIT_DB_PATH="/tmp/ignored.db", SQLITEKIT_FOREIGN_KEYS="1")
        try:
            with patch.dict(os.environ, env, clear=True):
                db = Database(tmp.name)
            self.assertEqual(db.path, Path(tmp.name))
            self.assertEqual(db.fetch_scalar("PRAGMA foreign_keys"), 1)
            db.close()
        finally:
            os.unlink(tmp.name)


class TestModuleSingleton(unittest.TestCase):
    def setUp(self):
        reset_db()
        tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
        tmp.close()
        self.path = Path(tmp.name)

    def tearDown(self):
        reset_db()
        os.unlink(self.path)

    def test_get_db_returns_same_instance(self):
        first = get_db(self.path)
        self.assertIs(get_db(), first)
        self.assertEqual(first.path, self.path)
        self.assertFalse(first.is_connected)

    def test_reset_closes_and_discards(self):
        db = get_db(self.path)
        db.fetch_scalar("SELECT 1")
        reset_db()
        self.assertFalse(db.is_connected)
        self.assertIsNone(db_module._default_db)

    def test_get_db_reads_environment(self):
        env = _clean_env(SQLITEKIT_DB_PATH=str(self.path), SQLITEKIT_FOREIGN_KEYS="1")
        with patch.dict(os.environ, env, clear=True):
            db = get_db()
        self.assertEqual(db.path, self.path)
        self.assertEqual(db.fetch_scalar("PRAGMA foreign_keys"), 1)


if __name__ == "__main__":
    unittest.main()
