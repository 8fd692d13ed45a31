# src/taskdeck/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing is read at import time except the environment.
- Every consumer receives settings explicitly (easy to replace in tests).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKDECK"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    log_dir: Path
    export_dir: Path

    # ---- Storage partitions ----
    task_store_key: str
    settings_store_key: str

    # ---- Persistence write-through ----
    background_writes: bool
    persist_max_attempts: int
    persist_retry_delay_seconds: float

    @staticmethod
    def from_env() -> Settings:
        app_name = _env(_k("APP_NAME"), "taskdeck") or "taskdeck"
        log_level = _env(_k("LOG_LEVEL"), "WARNING")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskdeck"))
        log_dir = _env_path(_k("LOG_DIR"), data_dir)
        export_dir = _env_path(_k("EXPORT_DIR"), data_dir / "exports")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            log_dir=log_dir,
            export_dir=export_dir,
            task_store_key=_env(_k("TASK_STORE_KEY"), "task-store"),
            settings_store_key=_env(_k("SETTINGS_STORE_KEY"), "settings-store"),
            background_writes=_env_bool(_k("BACKGROUND_WRITES"), True),
            persist_max_attempts=max(1, _env_int(_k("PERSIST_MAX_ATTEMPTS"), 3)),
            persist_retry_delay_seconds=max(0.0, _env_float(_k("PERSIST_RETRY_DELAY"), 0.5)),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load .env (without overriding real env vars) and build Settings once."""
    load_dotenv(override=False)
    return Settings.from_env()
