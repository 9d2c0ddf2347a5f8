# src/gtd_sync/cli/main.py

"""
CLI entrypoint (`gtd-sync`).

Initializes logging, builds AppState, then either:
- runs a single command and exits (`gtd-sync scan`, `gtd-sync run-all`, ...), or
- starts the periodic scheduler in a background thread and the console REPL.
"""

from __future__ import annotations

import logging
import signal
import sys
import threading

from ..cli.bootstrap import create_initial_state, persist_sync_state, start_scheduler, stop_scheduler
from ..config import get_settings
from ..connectors.console_connector import handle_line, run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        stop_scheduler(state)
    except Exception:
        logger.exception("Failed to stop scheduler.")

    try:
        persist_sync_state(state)
    except Exception:
        logger.exception("Failed to save sync state.")


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)
    state = create_initial_state(settings=settings)

    # One-shot mode: `gtd-sync scan`
    if argv:
        response = handle_line(state, "/" + " ".join(argv).lstrip("/"))
        if response:
            print(response)
        return 0

    start_scheduler(state)

    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except Exception:
        # Some platforms may not support SIGTERM, etc.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Running periodic operations only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        _shutdown(state)
        logger.info("Bye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
