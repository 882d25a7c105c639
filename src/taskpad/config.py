# src/taskpad/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time: every variable has a default.

Environment variables (prefix TASKPAD_):
- TASKPAD_APP_NAME                 display name (default: taskpad)
- TASKPAD_LOG_LEVEL                console log level (default: INFO)
- TASKPAD_DATA_DIR                 local data directory (default: .local/taskpad)
- TASKPAD_DB_PATH                  key-value SQLite file (default: <data_dir>/storage.sqlite3)
- TASKPAD_EXPORT_DIR               export target directory (default: <data_dir>/exports)
- TASKPAD_CREATED_BY               attribution for new tasks (default: You)
- TASKPAD_OVERDUE_CHECK_ENABLED    run the periodic overdue check (default: true)
- TASKPAD_OVERDUE_CHECK_INTERVAL   seconds between overdue checks (default: 3600)
- TASKPAD_NOTIFICATIONS            notification permission: granted | denied | default
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKPAD"

NOTIFICATION_PERMISSIONS = ("granted", "denied", "default")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


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


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = _env(name, default).strip().lower()
    return raw if raw in choices else default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path
    export_dir: Path

    # ---- Tasks ----
    created_by: str

    # ---- Notifications ----
    overdue_check_enabled: bool
    overdue_check_interval_seconds: int
    notification_permission: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskpad").strip() or "taskpad"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskpad"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "storage.sqlite3")
        export_dir = _env_path(_k("EXPORT_DIR"), data_dir / "exports")

        created_by = _env(_k("CREATED_BY"), "You").strip() or "You"

        overdue_check_enabled = _env_bool(_k("OVERDUE_CHECK_ENABLED"), True)
        # Never poll more often than once a second.
        overdue_check_interval_seconds = max(1, _env_int(_k("OVERDUE_CHECK_INTERVAL"), 3600))
        notification_permission = _env_choice(
            _k("NOTIFICATIONS"), NOTIFICATION_PERMISSIONS, "granted"
        )

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            db_path=db_path,
            export_dir=export_dir,
            created_by=created_by,
            overdue_check_enabled=overdue_check_enabled,
            overdue_check_interval_seconds=overdue_check_interval_seconds,
            notification_permission=notification_permission,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
