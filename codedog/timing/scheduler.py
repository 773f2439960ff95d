"""Scheduler - Delayed and periodic callbacks for the controller.

The controller never sleeps. Every delay is a scheduled re-entry through
a Scheduler, so the controller can run on the live asyncio loop
(LoopScheduler) or under virtual time in tests (ManualScheduler).

Callbacks are plain synchronous functions. A callback that raises is
logged and counted; it never reaches the event loop's exception handler
and never stops a periodic timer.
"""

from __future__ import annotations

import asyncio
import functools
from typing import Callable, Protocol

from codedog.observability.logging import get_logger
from codedog.observability.metrics import record_timer_error
from codedog.timing.clock import MonotonicClock, get_clock

logger = get_logger(__name__)

TimerCallback = Callable[[], None]


class TimerHandle(Protocol):
    """Anything returned by a scheduler that can be cancelled."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Time source plus one-shot and periodic callbacks."""

    def now_ms(self) -> int: ...

    def call_later(self, delay_ms: int, callback: TimerCallback) -> TimerHandle: ...

    def call_every(self, interval_ms: int, callback: TimerCallback) -> TimerHandle: ...


def guarded(callback: TimerCallback) -> TimerCallback:
    """Wrap a timer callback so that errors are logged, not raised."""

    @functools.wraps(callback)
    def wrapper() -> None:
        try:
            callback()
        except Exception as e:
            record_timer_error()
            logger.warning(
                "timer_callback_error",
                callback=getattr(callback, "__qualname__", repr(callback)),
                error=str(e),
            )

    return wrapper


class PeriodicTask:
    """Runs a callback every interval_ms on the event loop.

    Usage:
        task = PeriodicTask(500, on_tick)
        task.start()
        ...
        task.cancel()
    """

    def __init__(self, interval_ms: int, callback: TimerCallback) -> None:
        self._interval_ms = max(1, interval_ms)
        self._callback = guarded(callback)
        self._running = False
        self._task: asyncio.Task | None = None

    def start(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Start the periodic loop."""
        if self._running:
            return

        self._running = True
        loop = loop or asyncio.get_running_loop()
        self._task = loop.create_task(self._run())

    def cancel(self) -> None:
        """Stop the periodic loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        """Background loop invoking the callback."""
        interval_s = self._interval_ms / 1000.0

        while self._running:
            try:
                await asyncio.sleep(interval_s)

                if not self._running:
                    break

                self._callback()

            except asyncio.CancelledError:
                break

    @property
    def is_running(self) -> bool:
        """Whether the loop is active."""
        return self._running


class LoopScheduler:
    """Scheduler backed by the asyncio event loop.

    Must be used from the loop's thread, which is also the controller's
    only thread.

    Usage:
        scheduler = LoopScheduler()
        handle = scheduler.call_later(200, on_typing_stopped)
        handle.cancel()
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        clock: MonotonicClock | None = None,
    ) -> None:
        self._loop = loop
        self._clock = clock or get_clock()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now_ms(self) -> int:
        """Current monotonic time in milliseconds."""
        return self._clock.now_ms()

    def call_later(self, delay_ms: int, callback: TimerCallback) -> asyncio.TimerHandle:
        """Run callback once after delay_ms (negative delays run immediately)."""
        delay_s = max(0, delay_ms) / 1000.0
        return self._get_loop().call_later(delay_s, guarded(callback))

    def call_every(self, interval_ms: int, callback: TimerCallback) -> PeriodicTask:
        """Run callback every interval_ms until cancelled."""
        task = PeriodicTask(interval_ms, callback)
        task.start(self._get_loop())
        return task
