# src/gtd_sync/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..config import Settings
from ..sync.engine import (
    OP_CHECKBOX,
    OP_CREATE,
    OP_DELETE_COMPLETED,
    OP_DELETE_TRASH,
    OP_SCHEDULE,
    ReconciliationEngine,
)
from ..sync.sync_store import SyncStore
from .ports import VaultPort

if TYPE_CHECKING:
    from ..sync.scheduler import SchedulerRunner


@dataclass
class AppState:
    settings: Settings
    vault: VaultPort
    store: SyncStore
    engine: ReconciliationEngine

    # Serializes operations between the console and the background scheduler.
    lock: threading.Lock = field(default_factory=threading.Lock)
    scheduler: SchedulerRunner | None = None

    def enabled_operations(self) -> dict[str, bool]:
        s = self.settings
        return {
            OP_CREATE: s.auto_create_from_todo,
            OP_CHECKBOX: s.auto_update_checkbox,
            OP_SCHEDULE: s.auto_update_schedule,
            OP_DELETE_COMPLETED: s.auto_delete_completed,
            OP_DELETE_TRASH: s.auto_delete_trash,
        }
