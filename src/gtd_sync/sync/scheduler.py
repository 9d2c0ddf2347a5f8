# src/gtd_sync/sync/scheduler.py

from __future__ import annotations

"""
Periodic scheduler.

A small polling loop that runs each enabled reconciliation operation once its
interval has elapsed, calling the same engine entry points as the commands do.

Operations never overlap: each run holds the shared lock, which the console
takes as well. The first run of an operation happens one interval after start.
"""

import asyncio
import contextlib
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..config import Settings
from ..logging_setup import SCHEDULER_THREAD_NAME
from .engine import (
    OP_CHECKBOX,
    OP_CREATE,
    OP_DELETE_COMPLETED,
    OP_DELETE_TRASH,
    OP_SCHEDULE,
    ReconciliationEngine,
)

logger = logging.getLogger(__name__)

AfterRun = Callable[[str, int], None]

SECONDS_PER_HOUR = 3600.0


@dataclass(slots=True, frozen=True)
class ScheduledOperation:
    name: str
    interval_seconds: float


def schedule_from_settings(settings: Settings) -> list[ScheduledOperation]:
    """Enabled operations with their intervals, in run-all order."""
    table = (
        (OP_CREATE, settings.auto_create_from_todo, settings.create_from_todo_interval),
        (OP_CHECKBOX, settings.auto_update_checkbox, settings.update_checkbox_interval),
        (OP_SCHEDULE, settings.auto_update_schedule, settings.update_schedule_interval),
        (OP_DELETE_COMPLETED, settings.auto_delete_completed, settings.delete_completed_interval),
        (OP_DELETE_TRASH, settings.auto_delete_trash, settings.delete_trash_interval),
    )
    return [
        ScheduledOperation(name=name, interval_seconds=float(hours) * SECONDS_PER_HOUR)
        for name, enabled, hours in table
        if enabled
    ]


async def run_periodic_operations(
        engine: ReconciliationEngine,
        schedule: list[ScheduledOperation],
        *,
        lock: threading.Lock,
        stop_event: asyncio.Event,
        after_run: AfterRun | None = None,
        tick_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
) -> None:
    """
    Every tick_seconds:
    - pick operations whose interval elapsed since their last run
    - run each one under `lock` (skipped until the next tick if the lock is taken)
    - call after_run(name, count) while still holding `lock` (the host saves the store there)

    Returns when stop_event is set.
    """
    sleep_s = max(0.01, float(tick_seconds))
    started = clock()
    last_run = {op.name: started for op in schedule}

    if not schedule:
        logger.info("No periodic GTD operations enabled.")

    while not stop_event.is_set():
        now = clock()
        for op in schedule:
            if now - last_run[op.name] < op.interval_seconds:
                continue
            # Never block the loop on the lock: a busy console just delays us one tick.
            if not lock.acquire(blocking=False):
                logger.debug("Lock busy, %s deferred", op.name)
                continue
            last_run[op.name] = now

            try:
                count = await engine.run_operation(op.name)
                logger.info("Periodic %s -> %d", op.name, count)
                if after_run is not None:
                    try:
                        after_run(op.name, count)
                    except Exception:
                        logger.exception("after_run hook failed for %s", op.name)
            except Exception:
                logger.exception("Periodic operation %s failed", op.name)
            finally:
                lock.release()

        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)


@dataclass
class SchedulerRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal scheduler stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_scheduler_in_background(
        engine: ReconciliationEngine,
        settings: Settings,
        *,
        lock: threading.Lock,
        after_run: AfterRun | None = None,
        tick_seconds: float = 30.0,
) -> SchedulerRunner | None:
    """
    Start the periodic loop in a daemon thread with its own event loop
    (the console REPL blocks the main thread on input()).
    """
    schedule = schedule_from_settings(settings)
    if not schedule:
        logger.info("Periodic operations disabled, scheduler not started.")
        return None

    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_periodic_operations(
                    engine,
                    schedule,
                    lock=lock,
                    stop_event=stop_event,
                    after_run=after_run,
                    tick_seconds=tick_seconds,
                )
            )
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name=SCHEDULER_THREAD_NAME, daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")
    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Scheduler thread failed to start.")
        return None

    logger.info("Scheduler started: %s", ", ".join(op.name for op in schedule))
    return SchedulerRunner(thread=t, loop=loop, stop_event=stop_event)
