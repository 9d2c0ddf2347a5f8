# src/gtd_sync/cli/commands.py

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..sync.engine import (
    OP_CHECKBOX,
    OP_CREATE,
    OP_DELETE_COMPLETED,
    OP_DELETE_TRASH,
    OP_SCHEDULE,
)
from .bootstrap import persist_settings, persist_sync_state, start_scheduler

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

# CLI name -> engine operation
OPERATION_ALIASES = {
    "scan": OP_CREATE,
    "checkboxes": OP_CHECKBOX,
    "overdue": OP_SCHEDULE,
    "clean-done": OP_DELETE_COMPLETED,
    "clean-trash": OP_DELETE_TRASH,
}

# settings field prefixes per operation: auto_<x> / <y>_interval
_SETTINGS_FIELDS = {
    OP_CREATE: ("auto_create_from_todo", "create_from_todo_interval"),
    OP_CHECKBOX: ("auto_update_checkbox", "update_checkbox_interval"),
    OP_SCHEDULE: ("auto_update_schedule", "update_schedule_interval"),
    OP_DELETE_COMPLETED: ("auto_delete_completed", "delete_completed_interval"),
    OP_DELETE_TRASH: ("auto_delete_trash", "delete_trash_interval"),
}

_RESULT_MESSAGES = {
    OP_CREATE: "Created {n} new task(s) from #TODO.",
    OP_CHECKBOX: "Checked {n} checkbox(es).",
    OP_SCHEDULE: "Updated {n} overdue task(s).",
    OP_DELETE_COMPLETED: "Deleted {n} completed task(s).",
    OP_DELETE_TRASH: "Deleted {n} trash task(s).",
}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /scan, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _run_operation(state: AppState, op: str) -> str:
    count = asyncio.run(state.engine.run_operation(op))
    # Roll-forward only edits task notes; the store is untouched.
    if op != OP_SCHEDULE:
        persist_sync_state(state)
    return _RESULT_MESSAGES[op].format(n=count)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_scan(state: AppState, args: list[str]) -> str:
    return _run_operation(state, OP_CREATE)


def cmd_checkboxes(state: AppState, args: list[str]) -> str:
    return _run_operation(state, OP_CHECKBOX)


def cmd_overdue(state: AppState, args: list[str]) -> str:
    return _run_operation(state, OP_SCHEDULE)


def cmd_clean_done(state: AppState, args: list[str]) -> str:
    return _run_operation(state, OP_DELETE_COMPLETED)


def cmd_clean_trash(state: AppState, args: list[str]) -> str:
    return _run_operation(state, OP_DELETE_TRASH)


def cmd_run_all(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    """Run every operation enabled in settings, in order, then save the sync state."""
    report = asyncio.run(state.engine.run_all(state.enabled_operations()))
    persist_sync_state(state)

    if report.failed:
        return "An error occurred while running GTD operations (see log)."

    if emit:
        for op, count in report.counts.items():
            if count > 0:
                with contextlib.suppress(Exception):
                    emit(_RESULT_MESSAGES[op].format(n=count))

    if report.total == 0:
        return "GTD operations complete (no changes)."
    return f"GTD operations complete ({report.total} change(s))."


def cmd_status(state: AppState, args: list[str]) -> str:
    s = state.settings
    scopes = ", ".join(d for d in s.search_directories if d) or "(whole vault)"
    lines = [
        "Status:",
        f"  Task directory: {s.task_directory}",
        f"  Search directories: {scopes}",
        f"  Tracked #TODOs: {len(state.store)}",
        f"  Scheduler: {'running' if state.scheduler is not None else 'off'}",
    ]
    for alias, op in OPERATION_ALIASES.items():
        flag_field, interval_field = _SETTINGS_FIELDS[op]
        on = "ON" if getattr(s, flag_field) else "OFF"
        lines.append(f"  {alias}: {on} every {getattr(s, interval_field)}h")
    return "\n".join(lines)


def cmd_auto(state: AppState, args: list[str]) -> str:
    """
    /auto <op> on|off       -> enable/disable a periodic operation
    /auto <op> every <h>    -> set its interval in hours (1..168)
    """
    usage = f"Usage: /auto <{'|'.join(OPERATION_ALIASES)}> on|off|every <hours>"
    if len(args) < 2 or args[0].lower() not in OPERATION_ALIASES:
        return usage

    op = OPERATION_ALIASES[args[0].lower()]
    flag_field, interval_field = _SETTINGS_FIELDS[op]
    arg = args[1].lower()

    if arg in ("on", "1", "true", "yes"):
        changes: dict[str, object] = {flag_field: True}
    elif arg in ("off", "0", "false", "no"):
        changes = {flag_field: False}
    elif arg == "every" and len(args) >= 3:
        try:
            changes = {interval_field: int(args[2])}
        except ValueError:
            return usage
    else:
        return usage

    state.settings = state.settings.with_changes(**changes)
    logger.info("Settings changed: %s", changes)
    saved = persist_settings(state)
    start_scheduler(state)

    flag = "ON" if getattr(state.settings, flag_field) else "OFF"
    reply = f"{args[0].lower()}: {flag} every {getattr(state.settings, interval_field)}h."
    if not saved:
        reply += " (could not be saved; applies to this session only)"
    return reply


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show settings and sync state.")
registry.register("scan", cmd_scan, help_text="Create tasks from new #TODO items.")
registry.register("checkboxes", cmd_checkboxes, help_text="Check #TODO boxes of completed tasks.")
registry.register("overdue", cmd_overdue, help_text="Move overdue scheduled dates to today.")
registry.register("clean-done", cmd_clean_done, help_text="Delete completed tasks.")
registry.register("clean-trash", cmd_clean_trash, help_text="Delete trash tasks.")
registry.register("run-all", cmd_run_all, help_text="Run all enabled operations.", aliases=["all"])
registry.register("auto", cmd_auto, help_text="Periodic runs: /auto <op> on | off | every <hours>.")
