"""
Central configuration loader.
Reads from environment variables (via .env); validates numeric keys.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# ---------------------------------------------------------------------------
# Load .env from the working directory (if present)
# ---------------------------------------------------------------------------
load_dotenv(Path.cwd() / ".env")

_TRUTHY = ("1", "true", "yes")


def _get(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    val = os.getenv(key, default)
    if required and not val:
        raise EnvironmentError(f"Missing required environment variable: {key}")
    return val


def _get_bool(key: str, default: bool) -> bool:
    val = _get(key)
    if val is None or not val.strip():
        return default
    return val.strip().lower() in _TRUTHY


def _get_float(key: str, default: float) -> float:
    val = _get(key)
    if val is None or not val.strip():
        return default
    try:
        return float(val)
    except ValueError:
        raise EnvironmentError(f"Invalid number in environment variable {key}: {val!r}") from None


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class DatabaseConfig:
    path: Path
    # Seconds sqlite3 waits on a locked database before raising.
    timeout: float = 5.0
    foreign_keys: bool = False
    check_same_thread: bool = True


def get_db_path() -> Path:
    return Path(_get("SQLITEKIT_DB_PATH", default=str(Path.cwd() / "data" / "app.db")))  # type: ignore[arg-type]


def get_database_config() -> DatabaseConfig:
    return DatabaseConfig(
        path=get_db_path(),
        timeout=_get_float("SQLITEKIT_TIMEOUT", 5.0),
        foreign_keys=_get_bool("SQLITEKIT_FOREIGN_KEYS", False),
        check_same_thread=_get_bool("SQLITEKIT_CHECK_SAME_THREAD", True),
    )
