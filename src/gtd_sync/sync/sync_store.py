# src/gtd_sync/sync/sync_store.py

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from .sync_models import SyncEntry

logger = logging.getLogger(__name__)

SYNC_DATA_KEY = "taskSyncData"


class SyncStore:
    """
    In-memory map of todo_id -> SyncEntry.

    Pure bookkeeping: owns no files and validates nothing beyond overwrite-by-key.
    One instance is owned by the host and handed to the engine; it has no locking,
    so callers must never run two operations against it at the same time.
    """

    def __init__(self) -> None:
        self._entries: dict[str, SyncEntry] = {}

    def load(self, entries: Mapping[str, SyncEntry]) -> None:
        """Replace all entries (called once at startup)."""
        self._entries = dict(entries)

    def snapshot(self) -> dict[str, SyncEntry]:
        return dict(self._entries)

    def has(self, todo_id: str) -> bool:
        return todo_id in self._entries

    def get(self, todo_id: str) -> SyncEntry | None:
        return self._entries.get(todo_id)

    def set(self, todo_id: str, entry: SyncEntry) -> None:
        self._entries[todo_id] = entry

    def delete(self, todo_id: str) -> bool:
        return self._entries.pop(todo_id, None) is not None

    def find_by_task_file(self, task_file: str) -> str | None:
        """Key of the first entry pointing at `task_file`, or None."""
        for key, entry in self._entries.items():
            if entry.task_file == task_file:
                return key
        return None

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, todo_id: object) -> bool:
        return todo_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))


# ---- persistence ----


def entries_from_record(raw: Any) -> dict[str, SyncEntry]:
    """Decode the `taskSyncData` mapping, skipping malformed entries."""
    if not isinstance(raw, dict):
        return {}
    out: dict[str, SyncEntry] = {}
    for key, value in raw.items():
        if not isinstance(key, str) or not isinstance(value, dict):
            logger.warning("Skipping malformed sync entry key=%r", key)
            continue
        try:
            out[key] = SyncEntry.from_dict(value)
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed sync entry key=%r", key)
    return out


def entries_to_record(entries: Mapping[str, SyncEntry]) -> dict[str, dict[str, Any]]:
    return {key: entry.to_dict() for key, entry in entries.items()}


def _read_record(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    text = path.read_text("utf-8")
    if not text.strip():
        return {}
    data = json.loads(text)
    return data if isinstance(data, dict) else {}


def load_sync_state(path: str | Path) -> dict[str, SyncEntry]:
    """Read persisted sync entries (best-effort: unreadable state loads as empty)."""
    path = Path(path)
    try:
        record = _read_record(path)
    except Exception:
        logger.exception("Failed to read sync state from %s", path)
        return {}
    entries = entries_from_record(record.get(SYNC_DATA_KEY))
    logger.info("Loaded sync state: %d entries from %s", len(entries), path)
    return entries


def load_state_field(path: str | Path, key: str) -> Any:
    """One top-level field of the state record (None if absent or unreadable)."""
    path = Path(path)
    try:
        return _read_record(path).get(key)
    except Exception:
        logger.exception("Failed to read %s from %s", key, path)
        return None


def save_state_field(path: str | Path, key: str, value: Any) -> bool:
    """
    Set one top-level field of the state record and write it atomically.

    Other keys of an existing record are kept; an unreadable record is rewritten.
    Returns False on failure.
    """
    path = Path(path)
    try:
        try:
            record = _read_record(path)
        except Exception:
            logger.warning("Existing state at %s is unreadable; rewriting it.", path)
            record = {}
        record[key] = value

        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(record, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, path)
        return True
    except Exception:
        logger.exception("Failed to save %s to %s", key, path)
        return False


def save_sync_state(path: str | Path, store: SyncStore) -> bool:
    """Write the store snapshot into the `taskSyncData` field of the state record."""
    ok = save_state_field(path, SYNC_DATA_KEY, entries_to_record(store.snapshot()))
    if ok:
        logger.debug("Saved sync state: %d entries to %s", len(store), path)
    return ok
