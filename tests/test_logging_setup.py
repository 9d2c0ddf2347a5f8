# tests/test_logging_setup.py

from __future__ import annotations

import logging

import pytest

from gtd_sync.logging_setup import SCHEDULER_THREAD_NAME, _ConsoleFilter


def _record(name: str, level: int, thread: str = "MainThread") -> logging.LogRecord:
    record = logging.LogRecord(name, level, __file__, 1, "msg", None, None)
    record.threadName = thread
    return record


@pytest.mark.parametrize(
    ("name", "level", "thread", "shown"),
    [
        ("gtd_sync.sync.engine", logging.INFO, "MainThread", True),
        ("gtd_sync.sync.engine", logging.INFO, SCHEDULER_THREAD_NAME, False),
        ("gtd_sync.sync.scheduler", logging.WARNING, SCHEDULER_THREAD_NAME, True),
        ("gtd_sync_other", logging.INFO, "MainThread", False),
        ("yaml", logging.WARNING, "MainThread", False),
        ("yaml", logging.ERROR, "MainThread", True),
    ],
)
def test_console_filter(name: str, level: int, thread: str, shown: bool) -> None:
    assert _ConsoleFilter().filter(_record(name, level, thread)) is shown
