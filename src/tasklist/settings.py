from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db'
    - PREFERENCES_PATH: JSON file for persisted view preferences. Default
      './data/preferences.json'; an empty value keeps preferences in memory
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - PAGE_SIZE: number of tasks revealed per page (default: 15)
    - SETTLE_DELAY_SECONDS: wait after a page advance before loading clears (default: 0.2)
    - REFRESH_DELAY_SECONDS: duration of the dummy refresh action (default: 0.6)
    - SEED_SAMPLE_DATA: 'true' to insert 100 sample tasks on first launch (default: false)
    - LOG_LEVEL: console log level (default: INFO)
    - LOG_DIR: directory for a log file; empty disables file logging
    """

    persistence_backend: str
    sqlite_db_path: str
    preferences_path: Optional[str]
    cors_allow_origins: List[str]
    page_size: int
    settle_delay_seconds: float
    refresh_delay_seconds: float
    seed_sample_data: bool
    log_level: str
    log_dir: Optional[str]


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_int(value: str, default: int, minimum: int = 1) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to memory if unsupported
        backend = "memory"

    sqlite_path = _get_env("SQLITE_DB_PATH", "./data/tasks.db").strip()

    # An explicitly empty PREFERENCES_PATH means "do not persist"
    prefs_raw = os.getenv("PREFERENCES_PATH")
    if prefs_raw is None:
        preferences_path: Optional[str] = "./data/preferences.json"
    else:
        preferences_path = prefs_raw.strip() or None

    log_dir = os.getenv("LOG_DIR", "").strip() or None

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=sqlite_path,
        preferences_path=preferences_path,
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        page_size=_parse_int(_get_env("PAGE_SIZE", "15"), 15),
        settle_delay_seconds=_parse_float(_get_env("SETTLE_DELAY_SECONDS", "0.2"), 0.2),
        refresh_delay_seconds=_parse_float(_get_env("REFRESH_DELAY_SECONDS", "0.6"), 0.6),
        seed_sample_data=_parse_bool(_get_env("SEED_SAMPLE_DATA", "false"), False),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        log_dir=log_dir,
    )
