# tests/test_scheduler.py

from __future__ import annotations

import asyncio
import threading

import pytest

from gtd_sync.sync.engine import OP_CHECKBOX, OP_CREATE, OP_DELETE_TRASH, OP_SCHEDULE
from gtd_sync.sync.scheduler import (
    ScheduledOperation,
    run_periodic_operations,
    schedule_from_settings,
)


class FakeEngine:
    """Records run_operation calls; optionally fails for one operation."""

    def __init__(self, fail: str | None = None) -> None:
        self.calls: list[str] = []
        self.fail = fail

    async def run_operation(self, name: str) -> int:
        self.calls.append(name)
        if name == self.fail:
            raise RuntimeError("boom")
        return 2


class StepClock:
    """Monotonic clock that advances a fixed step per reading."""

    def __init__(self, step: float) -> None:
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


async def _run_for(stop_event: asyncio.Event, coro, seconds: float = 0.05) -> None:
    runner = asyncio.create_task(coro)
    await asyncio.sleep(seconds)
    stop_event.set()
    await asyncio.wait_for(runner, timeout=1.0)


def test_schedule_from_settings_lists_enabled_in_order(settings) -> None:
    s = settings.with_changes(auto_delete_trash=True, delete_trash_interval=500)
    schedule = schedule_from_settings(s)

    assert [op.name for op in schedule] == [OP_CREATE, OP_CHECKBOX, OP_DELETE_TRASH]
    assert schedule[0].interval_seconds == 3600.0
    # clamped to one week
    assert schedule[-1].interval_seconds == 168 * 3600.0


@pytest.mark.asyncio
async def test_scheduler_runs_due_operations_and_reports() -> None:
    engine = FakeEngine()
    stop_event = asyncio.Event()
    reported: list[tuple[str, int]] = []

    await _run_for(
        stop_event,
        run_periodic_operations(
            engine,
            [ScheduledOperation(OP_CREATE, 10.0), ScheduledOperation(OP_SCHEDULE, 1e9)],
            lock=threading.Lock(),
            stop_event=stop_event,
            after_run=lambda name, count: reported.append((name, count)),
            tick_seconds=0.01,
            clock=StepClock(step=11.0),
        ),
    )

    assert engine.calls, "Scheduler should run the due operation at least once"
    assert set(engine.calls) == {OP_CREATE}
    assert reported[0] == (OP_CREATE, 2)


@pytest.mark.asyncio
async def test_scheduler_waits_one_interval_before_first_run() -> None:
    engine = FakeEngine()
    stop_event = asyncio.Event()

    await _run_for(
        stop_event,
        run_periodic_operations(
            engine,
            [ScheduledOperation(OP_CREATE, 3600.0)],
            lock=threading.Lock(),
            stop_event=stop_event,
            tick_seconds=0.01,
            clock=StepClock(step=0.0),
        ),
    )

    assert engine.calls == []


@pytest.mark.asyncio
async def test_scheduler_defers_while_lock_is_held() -> None:
    engine = FakeEngine()
    stop_event = asyncio.Event()
    lock = threading.Lock()
    lock.acquire()

    try:
        await _run_for(
            stop_event,
            run_periodic_operations(
                engine,
                [ScheduledOperation(OP_CREATE, 1.0)],
                lock=lock,
                stop_event=stop_event,
                tick_seconds=0.01,
                clock=StepClock(step=5.0),
            ),
        )
    finally:
        lock.release()

    assert engine.calls == []


@pytest.mark.asyncio
async def test_scheduler_survives_failing_operation() -> None:
    engine = FakeEngine(fail=OP_CREATE)
    stop_event = asyncio.Event()
    lock = threading.Lock()

    await _run_for(
        stop_event,
        run_periodic_operations(
            engine,
            [ScheduledOperation(OP_CREATE, 1.0), ScheduledOperation(OP_CHECKBOX, 1.0)],
            lock=lock,
            stop_event=stop_event,
            tick_seconds=0.01,
            clock=StepClock(step=5.0),
        ),
    )

    assert OP_CHECKBOX in engine.calls
    assert engine.calls.count(OP_CREATE) >= 2
    assert not lock.locked()


@pytest.mark.asyncio
async def test_after_run_is_called_while_lock_is_held() -> None:
    engine = FakeEngine()
    stop_event = asyncio.Event()
    lock = threading.Lock()
    held: list[bool] = []

    await _run_for(
        stop_event,
        run_periodic_operations(
            engine,
            [ScheduledOperation(OP_CREATE, 1.0)],
            lock=lock,
            stop_event=stop_event,
            after_run=lambda name, count: held.append(lock.locked()),
            tick_seconds=0.01,
            clock=StepClock(step=5.0),
        ),
    )

    assert held
    assert all(held)
    assert not lock.locked()
