# src/gtd_sync/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a default.
- Interval values are hours, clamped to 1..168.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List

from dotenv import load_dotenv

ENV_PREFIX = "GTD"

MIN_INTERVAL_HOURS = 1
MAX_INTERVAL_HOURS = 168


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv() -> None:
    """Load a local .env, never overriding variables already set."""
    load_dotenv(override=False)


_load_dotenv()


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


def _env_hours(name: str, default: int) -> int:
    return clamp_interval(_env_int(name, default))


def _env_dirs(name: str, default: List[str]) -> List[str]:
    """Comma-separated directory list; blank entries dropped."""
    raw = os.getenv(name)
    if raw is None:
        return list(default)
    return [p.strip().strip("/") for p in raw.split(",") if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def clamp_interval(hours: int) -> int:
    return max(MIN_INTERVAL_HOURS, min(MAX_INTERVAL_HOURS, int(hours)))


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    console_enabled: bool

    # ---- Vault layout ----
    vault_dir: Path
    task_directory: str
    search_directories: List[str]

    # ---- Local data paths ----
    data_dir: Path
    state_path: Path

    # ---- Periodic operations ----
    auto_create_from_todo: bool
    auto_update_checkbox: bool
    auto_update_schedule: bool
    auto_delete_completed: bool
    auto_delete_trash: bool

    create_from_todo_interval: int
    update_checkbox_interval: int
    update_schedule_interval: int
    delete_completed_interval: int
    delete_trash_interval: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "gtd-sync") or "gtd-sync"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        vault_dir = _env_path(_k("VAULT_DIR"), Path("."))
        task_directory = _env(_k("TASK_DIRECTORY"), "GTD/Tasks").strip().strip("/") or "GTD/Tasks"
        search_directories = _env_dirs(_k("SEARCH_DIRECTORIES"), [""])

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/gtd"))
        state_path = _env_path(_k("STATE_PATH"), data_dir / "data.json")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            vault_dir=vault_dir,
            task_directory=task_directory,
            search_directories=search_directories,
            data_dir=data_dir,
            state_path=state_path,
            auto_create_from_todo=_env_bool(_k("AUTO_CREATE_FROM_TODO"), False),
            auto_update_checkbox=_env_bool(_k("AUTO_UPDATE_CHECKBOX"), False),
            auto_update_schedule=_env_bool(_k("AUTO_UPDATE_SCHEDULE"), False),
            auto_delete_completed=_env_bool(_k("AUTO_DELETE_COMPLETED"), False),
            auto_delete_trash=_env_bool(_k("AUTO_DELETE_TRASH"), False),
            create_from_todo_interval=_env_hours(_k("AUTO_CREATE_FROM_TODO_INTERVAL"), 1),
            update_checkbox_interval=_env_hours(_k("AUTO_UPDATE_CHECKBOX_INTERVAL"), 1),
            update_schedule_interval=_env_hours(_k("AUTO_UPDATE_SCHEDULE_INTERVAL"), 24),
            delete_completed_interval=_env_hours(_k("AUTO_DELETE_COMPLETED_INTERVAL"), 24),
            delete_trash_interval=_env_hours(_k("AUTO_DELETE_TRASH_INTERVAL"), 24),
        )

    def with_changes(self, **changes) -> "Settings":
        """Return a copy with some fields replaced (intervals re-clamped)."""
        for name in list(changes):
            if name.endswith("_interval"):
                changes[name] = clamp_interval(changes[name])
        return replace(self, **changes)


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
