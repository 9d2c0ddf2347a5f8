# src/gtd_sync/sync/task_template.py

"""Task note naming and rendering."""

from __future__ import annotations

import re
from datetime import datetime

from .sync_models import CREATED_FROM_TODO, Marker, TaskStatus

_ILLEGAL_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE_RUN = re.compile(r"\s+")

MAX_FILENAME_TITLE = 50


def format_task_id(now: datetime) -> str:
    """Minute-precision task id, e.g. 202401011530."""
    return now.strftime("%Y%m%d%H%M")


def format_readable(now: datetime) -> str:
    return now.strftime("%Y-%m-%d %H:%M")


def format_readable_seconds(now: datetime) -> str:
    return now.strftime("%Y-%m-%d %H:%M:%S")


def sanitize_file_name(content: str) -> str:
    cleaned = _ILLEGAL_FILENAME_CHARS.sub("", content)
    cleaned = _WHITESPACE_RUN.sub("_", cleaned)
    return cleaned[:MAX_FILENAME_TITLE]


def task_file_name(task_id: str, content: str) -> str:
    return f"{task_id}_{sanitize_file_name(content)}.md"


def render_task(task_id: str, marker: Marker, now: datetime) -> str:
    """
    Full text of a new task note: front-matter, provenance section, marker text.

    The front-matter layout is written by hand (not dumped) so that empty fields
    stay empty and the key order matches what other vault tools expect.
    """
    link = f"[[{marker.source_file}]]"
    return (
        "---\n"
        f"ID: {task_id}\n"
        f"created: {format_readable(now)}\n"
        f"title: {marker.content}\n"
        "aliases: \n"
        "deadline: \n"
        "scheduled date: \n"
        "project: \n"
        "task kind: \n"
        f"task status: {TaskStatus.NOT_YET.value}\n"
        f"created_from: {CREATED_FROM_TODO}\n"
        f'source_file: "{link}"\n'
        f"source_line: {marker.line_number}\n"
        f"todo_id: {marker.marker_id}\n"
        "---\n"
        "\n"
        "## Source\n"
        "This task was created automatically from a #TODO in:\n"
        f"- File: {link}\n"
        f"- Line: {marker.line_number}\n"
        f"- Created at: {format_readable_seconds(now)}\n"
        "\n"
        "## Task\n"
        f"{marker.content}\n"
    )
