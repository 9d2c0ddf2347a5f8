# src/gtd_sync/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Records from this thread are written while the prompt waits for input; on the console
# they only show at WARNING and above. The log file keeps everything.
SCHEDULER_THREAD_NAME = "gtd-scheduler"


class _ConsoleFilter(logging.Filter):
    """gtd_sync records (scheduler-thread ones only at WARNING+) and foreign ERRORs."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.threadName == SCHEDULER_THREAD_NAME:
            return record.levelno >= logging.WARNING
        if record.name == "gtd_sync" or record.name.startswith("gtd_sync."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/gtd",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console: readable, filtered for the interactive prompt.
    File (<log_dir>/gtd.log): every sync decision, for tracing a lost or duplicated task.

    Returns the log file path. Call once, before the first log call.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "gtd.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(threadName)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    return log_file
