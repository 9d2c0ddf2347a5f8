# src/gtd_sync/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the filesystem vault, the Sync Store and the engine into AppState,
- hydrates / persists the Sync Store from the state record.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..sync.engine import ReconciliationEngine
from ..sync.scheduler import start_scheduler_in_background
from ..sync.sync_store import (
    SyncStore,
    load_state_field,
    load_sync_state,
    save_state_field,
    save_sync_state,
)
from ..vault.filesystem import FileSystemVault

logger = logging.getLogger(__name__)

# Settings changed at runtime (/auto) live next to taskSyncData and win over the environment.
SETTINGS_KEY = "settings"
PERSISTED_FLAGS = (
    "auto_create_from_todo",
    "auto_update_checkbox",
    "auto_update_schedule",
    "auto_delete_completed",
    "auto_delete_trash",
)
PERSISTED_INTERVALS = (
    "create_from_todo_interval",
    "update_checkbox_interval",
    "update_schedule_interval",
    "delete_completed_interval",
    "delete_trash_interval",
)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.state_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)
    settings = apply_saved_settings(settings)

    vault = FileSystemVault(settings.vault_dir)
    store = SyncStore()
    store.load(load_sync_state(settings.state_path))

    engine = ReconciliationEngine(
        vault,
        store,
        task_directory=settings.task_directory,
        search_directories=settings.search_directories,
    )
    logger.info("Vault %s, tasks in %s, %d tracked #TODO(s)", vault.root, settings.task_directory, len(store))
    return AppState(settings=settings, vault=vault, store=store, engine=engine)


def persist_sync_state(state: AppState) -> bool:
    return save_sync_state(state.settings.state_path, state.store)


def persist_settings(state: AppState) -> bool:
    s = state.settings
    values = {name: getattr(s, name) for name in PERSISTED_FLAGS + PERSISTED_INTERVALS}
    return save_state_field(s.state_path, SETTINGS_KEY, values)


def apply_saved_settings(settings):
    """Overlay the saved /auto settings, ignoring unknown or ill-typed values."""
    saved = load_state_field(settings.state_path, SETTINGS_KEY)
    if not isinstance(saved, dict):
        return settings

    changes = {}
    for name, value in saved.items():
        if name in PERSISTED_FLAGS and isinstance(value, bool):
            changes[name] = value
        elif name in PERSISTED_INTERVALS and isinstance(value, int) and not isinstance(value, bool):
            changes[name] = value
        else:
            logger.warning("Ignoring saved setting %s=%r", name, value)
    if changes:
        logger.info("Applied %d saved setting(s)", len(changes))
        return settings.with_changes(**changes)
    return settings


def start_scheduler(state: AppState) -> None:
    """Start (or restart, after a settings change) the periodic operations."""
    stop_scheduler(state)

    def after_run(_name: str, _count: int) -> None:
        # Roll-forward leaves the store alone; saving anyway is harmless.
        persist_sync_state(state)

    state.scheduler = start_scheduler_in_background(
        state.engine, state.settings, lock=state.lock, after_run=after_run
    )


def stop_scheduler(state: AppState, timeout: float = 10.0) -> None:
    runner = state.scheduler
    if runner is None:
        return
    runner.stop()
    runner.join(timeout=timeout)
    state.scheduler = None
