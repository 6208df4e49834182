"""Schedulers that run the driver's next turn on the host's terms."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol


class TurnHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs ``callback`` no sooner than ``delay`` seconds from now, without blocking the caller."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TurnHandle: ...


@dataclass
class ScheduledCall:
    delay: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """FIFO queue of callbacks run only when the host pumps it.

    Delays are recorded but not waited for; hosts that want pacing can sleep
    for ``next_delay`` themselves.
    """

    def __init__(self) -> None:
        self._queue: deque[ScheduledCall] = deque()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(delay, callback)
        self._queue.append(call)
        return call

    @property
    def pending(self) -> bool:
        self._drop_cancelled()
        return bool(self._queue)

    @property
    def next_delay(self) -> float | None:
        self._drop_cancelled()
        return self._queue[0].delay if self._queue else None

    def run_next(self) -> bool:
        """Run the oldest live callback; ``False`` if nothing was queued."""
        self._drop_cancelled()
        if not self._queue:
            return False
        call = self._queue.popleft()
        call.callback()
        return True

    def run_until_idle(self, max_turns: int | None = None) -> int:
        """Pump callbacks until none remain or ``max_turns`` have run."""
        turns = 0
        while max_turns is None or turns < max_turns:
            if not self.run_next():
                break
            turns += 1
        return turns

    def _drop_cancelled(self) -> None:
        while self._queue and self._queue[0].cancelled:
            self._queue.popleft()


class AsyncioScheduler:
    """Schedules turns on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)
