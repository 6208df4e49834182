"""Tests for turn schedulers."""

from __future__ import annotations

import asyncio

from turnbasic.console import ConsoleModel
from turnbasic.engine import BasicEngine
from turnbasic.runtime import AsyncioScheduler, ExecutionDriver, ManualScheduler


def test_manual_scheduler_runs_callbacks_in_order() -> None:
    scheduler = ManualScheduler()
    calls: list[str] = []
    scheduler.call_later(0.1, lambda: calls.append("a"))
    scheduler.call_later(0.2, lambda: calls.append("b"))

    assert scheduler.next_delay == 0.1
    assert scheduler.run_until_idle() == 2
    assert calls == ["a", "b"]
    assert scheduler.pending is False


def test_manual_scheduler_skips_cancelled_calls() -> None:
    scheduler = ManualScheduler()
    calls: list[str] = []
    handle = scheduler.call_later(0, lambda: calls.append("cancelled"))
    scheduler.call_later(0, lambda: calls.append("kept"))

    handle.cancel()

    assert scheduler.run_next() is True
    assert scheduler.run_next() is False
    assert calls == ["kept"]


def test_run_until_idle_honours_turn_limit() -> None:
    scheduler = ManualScheduler()

    def again() -> None:
        scheduler.call_later(0, again)

    scheduler.call_later(0, again)

    assert scheduler.run_until_idle(max_turns=5) == 5
    assert scheduler.pending is True


async def test_asyncio_scheduler_uses_running_loop() -> None:
    fired = asyncio.Event()
    scheduler = AsyncioScheduler()

    scheduler.call_later(0, fired.set)

    await asyncio.wait_for(fired.wait(), timeout=1)


async def test_driver_runs_program_on_event_loop() -> None:
    console = ConsoleModel()
    driver = ExecutionDriver(BasicEngine(), console, AsyncioScheduler(), turn_delay=0, seed=1)

    driver.load_program("10 FOR I = 1 TO 3\n20 PRINT I\n30 NEXT I\n")
    for _ in range(200):
        if not console.input_enabled:
            break
        await asyncio.sleep(0.001)

    assert console.lines == ["1", "2", "3"]
    assert console.input_enabled is False
