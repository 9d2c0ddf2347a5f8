# src/gtd_sync/sync/sync_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

# Front-matter keys of a task note (the on-disk schema other tools parse).
FM_ID = "ID"
FM_CREATED = "created"
FM_TITLE = "title"
FM_SCHEDULED_DATE = "scheduled date"
FM_TASK_KIND = "task kind"
FM_TASK_STATUS = "task status"
FM_CREATED_FROM = "created_from"
FM_SOURCE_FILE = "source_file"
FM_SOURCE_LINE = "source_line"
FM_TODO_ID = "todo_id"

CREATED_FROM_TODO = "todo"


class TaskStatus(StrEnum):
    NOT_YET = "not_yet"
    DOING = "doing"
    DONE = "done"
    HOLD = "hold"
    CANCEL = "cancel"


class TaskKind(StrEnum):
    TRASH = "trash"
    INBOX = "inbox"
    NEXT_ACTION = "next_action"
    PROJECT = "project"
    SOMEDAY = "someday"
    REFERENCE = "reference"


# Older vaults use the Japanese trash label.
TRASH_KIND_VALUES = frozenset({TaskKind.TRASH.value, "ごみ箱"})


def _fm_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def is_done(frontmatter: dict[str, Any]) -> bool:
    return _fm_str(frontmatter.get(FM_TASK_STATUS)) == TaskStatus.DONE.value


def is_trash(frontmatter: dict[str, Any]) -> bool:
    return _fm_str(frontmatter.get(FM_TASK_KIND)) in TRASH_KIND_VALUES


@dataclass(slots=True, frozen=True)
class Marker:
    """An unchecked `- [ ] #TODO` line found in a note."""

    content: str
    source_file: str
    line_number: int
    marker_id: str


@dataclass(slots=True)
class SyncEntry:
    """
    Link between a Marker and the task note generated for it.

    Serialized with the camelCase keys used by the persisted `taskSyncData` record.
    """

    todo_id: str
    task_file: str
    source_file: str
    source_line: int
    created: str  # ISO-8601

    @classmethod
    def new(cls, marker: Marker, task_file: str, now: datetime) -> SyncEntry:
        return cls(
            todo_id=marker.marker_id,
            task_file=task_file,
            source_file=marker.source_file,
            source_line=marker.line_number,
            created=now.isoformat(),
        )

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SyncEntry:
        """Build from a persisted record. Raises KeyError/ValueError on malformed input."""
        return cls(
            todo_id=str(d["todoId"]),
            task_file=str(d["taskFile"]),
            source_file=str(d["sourceFile"]),
            source_line=int(d["sourceLine"]),
            created=str(d.get("created", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "todoId": self.todo_id,
            "taskFile": self.task_file,
            "sourceFile": self.source_file,
            "sourceLine": self.source_line,
            "created": self.created,
        }
