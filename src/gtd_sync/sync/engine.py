# src/gtd_sync/sync/engine.py

from __future__ import annotations

"""
Reconciliation engine.

Five operations over the vault and the Sync Store:
- create_tasks_from_todos: turn new #TODO markers into task notes
- update_checkboxes_from_tasks: tick the source checkbox of finished tasks
- update_overdue_tasks: move past scheduled dates to today
- delete_completed_tasks / delete_trash_tasks: remove finished / trashed task notes

Every operation is a full sweep that returns a best-effort count. Failures are
handled per item (logged, skipped); nothing raises out of a public entry point.
Operations are re-entrant: an interrupted sweep is simply run again.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from ..core.ports import FrontMatter, VaultPort
from .scanner import CHECKED_BOX, UNCHECKED_BOX, UNCHECKED_MARKER, scan_vault, split_lines
from .sync_models import FM_SCHEDULED_DATE, Marker, SyncEntry, is_done, is_trash
from .sync_store import SyncStore
from .task_template import format_task_id, render_task, task_file_name

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(slots=True)
class OperationReport:
    """Counts of one run-all pass (only enabled operations appear)."""

    counts: dict[str, int] = field(default_factory=dict)
    failed: bool = False

    @property
    def total(self) -> int:
        return sum(self.counts.values())


# Order matters: new tasks first, deletions last.
OP_CREATE = "create_from_todo"
OP_CHECKBOX = "update_checkbox"
OP_SCHEDULE = "update_schedule"
OP_DELETE_COMPLETED = "delete_completed"
OP_DELETE_TRASH = "delete_trash"
ALL_OPERATIONS = (OP_CREATE, OP_CHECKBOX, OP_SCHEDULE, OP_DELETE_COMPLETED, OP_DELETE_TRASH)


def parse_scheduled_date(value: Any) -> date | None:
    """Calendar date from a front-matter value, or None if absent/unparsable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raw = str(value).strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError:
        return None


class ReconciliationEngine:
    def __init__(
        self,
        vault: VaultPort,
        store: SyncStore,
        *,
        task_directory: str,
        search_directories: list[str] | None = None,
        clock: Clock = datetime.now,
    ) -> None:
        self.vault = vault
        self.store = store
        self.task_directory = task_directory.strip("/")
        self.search_directories = list(search_directories or [])
        self._clock = clock

    # ---- helpers ----

    async def _task_files(self) -> list[str]:
        prefix = self.task_directory + "/"
        return [
            p
            for p in await self.vault.list_markdown_files()
            if p.startswith(prefix) or p == self.task_directory
        ]

    async def _frontmatter(self, path: str) -> FrontMatter:
        return await self.vault.get_frontmatter(path) or {}

    def _forget_task_file(self, path: str) -> None:
        key = self.store.find_by_task_file(path)
        if key is not None:
            self.store.delete(key)
            logger.debug("Dropped sync entry %s for deleted task %s", key, path)

    # ---- scan-and-create ----

    async def create_tasks_from_todos(self) -> int:
        created = 0
        try:
            async for marker in scan_vault(self.vault, self.search_directories):
                if self.store.has(marker.marker_id):
                    continue
                if await self._create_task(marker):
                    created += 1
        except Exception:
            logger.exception("Scanning for #TODO markers failed")
        if created:
            logger.info("Created %d task(s) from #TODO markers", created)
        return created

    async def _create_task(self, marker: Marker) -> bool:
        try:
            now = self._clock()
            task_id = format_task_id(now)
            task_path = f"{self.task_directory}/{task_file_name(task_id, marker.content)}"

            if not await self.vault.exists(self.task_directory):
                await self.vault.create_folder(self.task_directory)

            await self.vault.create(task_path, render_task(task_id, marker, now))

            self.store.set(marker.marker_id, SyncEntry.new(marker, task_path, now))
            logger.debug("Task %s created for %s:%d", task_path, marker.source_file, marker.line_number)
            return True
        except Exception:
            logger.exception(
                "Failed to create task from #TODO %s:%d", marker.source_file, marker.line_number
            )
            return False

    # ---- completion propagation ----

    async def update_checkboxes_from_tasks(self) -> int:
        updated = 0
        for todo_id in self.store.keys():
            entry = self.store.get(todo_id)
            if entry is None:
                continue
            try:
                if not await self.vault.exists(entry.task_file):
                    self.store.delete(todo_id)
                    logger.info("Dropped stale sync entry %s (task %s is gone)", todo_id, entry.task_file)
                    continue

                if not is_done(await self._frontmatter(entry.task_file)):
                    continue

                if await self._check_source_line(entry.source_file, entry.source_line):
                    self.store.delete(todo_id)
                    updated += 1
            except Exception:
                logger.exception("Failed to update checkbox for todo %s", todo_id)
        if updated:
            logger.info("Checked %d #TODO checkbox(es)", updated)
        return updated

    async def _check_source_line(self, source_file: str, line_number: int) -> bool:
        """Tick the checkbox at `line_number`. False (no-op) if the line no longer matches."""
        if not await self.vault.exists(source_file):
            logger.info("Source %s is gone; leaving its sync entry in place", source_file)
            return False

        lines = split_lines(await self.vault.read(source_file))
        if not 0 <= line_number < len(lines):
            return False

        line = lines[line_number]
        if UNCHECKED_MARKER not in line:
            logger.debug("Line %s:%d no longer holds an open #TODO", source_file, line_number)
            return False

        lines[line_number] = line.replace(UNCHECKED_BOX, CHECKED_BOX, 1)
        await self.vault.modify(source_file, "\n".join(lines))
        return True

    # ---- overdue roll-forward ----

    async def update_overdue_tasks(self) -> int:
        updated = 0
        today = self._clock().date()

        def roll_forward(fm: FrontMatter) -> None:
            # a date object, so YAML writes a bare 2024-01-02 rather than a quoted string
            fm[FM_SCHEDULED_DATE] = today

        try:
            task_files = await self._task_files()
        except Exception:
            logger.exception("Listing task files failed")
            return 0

        for path in task_files:
            try:
                scheduled = parse_scheduled_date((await self._frontmatter(path)).get(FM_SCHEDULED_DATE))
                if scheduled is None or scheduled >= today:
                    continue
                await self.vault.process_frontmatter(path, roll_forward)
                updated += 1
            except Exception:
                logger.exception("Failed to update overdue task %s", path)
        if updated:
            logger.info("Moved %d overdue task(s) to %s", updated, today.isoformat())
        return updated

    # ---- deletion sweeps ----

    async def _delete_matching(self, predicate: Callable[[FrontMatter], bool], label: str) -> int:
        deleted = 0
        try:
            task_files = await self._task_files()
        except Exception:
            logger.exception("Listing task files failed")
            return 0

        for path in task_files:
            try:
                if not predicate(await self._frontmatter(path)):
                    continue
                await self.vault.delete(path)
                deleted += 1
                self._forget_task_file(path)
            except Exception:
                logger.exception("Failed to process %s task file %s", label, path)
        if deleted:
            logger.info("Deleted %d %s task(s)", deleted, label)
        return deleted

    async def delete_completed_tasks(self) -> int:
        return await self._delete_matching(is_done, "completed")

    async def delete_trash_tasks(self) -> int:
        return await self._delete_matching(is_trash, "trash")

    # ---- aggregate ----

    async def run_operation(self, name: str) -> int:
        if name == OP_CREATE:
            return await self.create_tasks_from_todos()
        if name == OP_CHECKBOX:
            return await self.update_checkboxes_from_tasks()
        if name == OP_SCHEDULE:
            return await self.update_overdue_tasks()
        if name == OP_DELETE_COMPLETED:
            return await self.delete_completed_tasks()
        if name == OP_DELETE_TRASH:
            return await self.delete_trash_tasks()
        raise ValueError(f"Unknown operation: {name}")

    async def run_all(self, enabled: dict[str, bool]) -> OperationReport:
        """Run every enabled operation in the fixed order."""
        report = OperationReport()
        try:
            for name in ALL_OPERATIONS:
                if enabled.get(name):
                    report.counts[name] = await self.run_operation(name)
        except Exception:
            logger.exception("GTD run-all failed")
            report.failed = True
        return report
