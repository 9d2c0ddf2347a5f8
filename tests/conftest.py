# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from gtd_sync.config import Settings
from gtd_sync.core.state import AppState
from gtd_sync.sync.engine import ReconciliationEngine
from gtd_sync.sync.sync_store import SyncStore

from .fakes import FakeVault

FIXED_NOW = datetime(2024, 1, 15, 9, 30, 12)
TASK_DIR = "GTD/Tasks"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Explicit Settings for tests.

    Built directly rather than from the environment, to keep unit tests
    isolated and deterministic.
    """
    return Settings(
        app_name="gtd-test",
        log_level="DEBUG",
        console_enabled=False,
        vault_dir=tmp_path / "vault",
        task_directory=TASK_DIR,
        search_directories=[""],
        data_dir=tmp_path / "data",
        state_path=tmp_path / "data" / "data.json",
        auto_create_from_todo=True,
        auto_update_checkbox=True,
        auto_update_schedule=False,
        auto_delete_completed=False,
        auto_delete_trash=False,
        create_from_todo_interval=1,
        update_checkbox_interval=1,
        update_schedule_interval=24,
        delete_completed_interval=24,
        delete_trash_interval=24,
    )


@pytest.fixture()
def vault() -> FakeVault:
    return FakeVault()


@pytest.fixture()
def store() -> SyncStore:
    return SyncStore()


@pytest.fixture()
def engine(vault: FakeVault, store: SyncStore) -> ReconciliationEngine:
    return ReconciliationEngine(
        vault,
        store,
        task_directory=TASK_DIR,
        search_directories=[""],
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture()
def state(settings: Settings, vault: FakeVault, store: SyncStore, engine: ReconciliationEngine) -> AppState:
    """AppState wired with the in-memory vault; the state file lives under tmp_path."""
    return AppState(settings=settings, vault=vault, store=store, engine=engine)
