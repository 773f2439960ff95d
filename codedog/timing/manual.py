"""Manual Scheduler - Virtual time for tests and replays.

Provides the same interface as LoopScheduler but time only moves when
advance() is called. Due callbacks run in (due time, scheduling order),
and now_ms() reports each callback's own due time while it runs, so a
replay of a signal trace is fully deterministic.

Unlike LoopScheduler, callback errors propagate to the caller of
advance() so that tests see them.

Usage:
    scheduler = ManualScheduler()
    controller = AnimationController(renderer, catalog, scheduler)
    controller.start()
    controller.dispatch(EditChanged())
    scheduler.advance(200)
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field

from codedog.timing.scheduler import TimerCallback


class ManualTimer:
    """Handle for a callback queued on a ManualScheduler."""

    def __init__(
        self,
        due_ms: int,
        callback: TimerCallback,
        interval_ms: int | None = None,
    ) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self.interval_ms = interval_ms
        self.cancelled = False

    def cancel(self) -> None:
        """Prevent any further invocation."""
        self.cancelled = True

    @property
    def periodic(self) -> bool:
        """Whether the timer repeats."""
        return self.interval_ms is not None


@dataclass(order=True)
class _Entry:
    due_ms: int
    seq: int
    timer: ManualTimer = field(compare=False)


class ManualScheduler:
    """Deterministic virtual-time scheduler."""

    def __init__(self, start_ms: int = 0) -> None:
        self._now_ms = start_ms
        self._queue: list[_Entry] = []
        self._seq = itertools.count()

    def now_ms(self) -> int:
        """Current virtual time."""
        return self._now_ms

    def call_later(self, delay_ms: int, callback: TimerCallback) -> ManualTimer:
        """Queue callback to run once at now + delay_ms."""
        timer = ManualTimer(self._now_ms + max(0, delay_ms), callback)
        self._push(timer)
        return timer

    def call_every(self, interval_ms: int, callback: TimerCallback) -> ManualTimer:
        """Queue callback to run every interval_ms, first at now + interval_ms."""
        interval_ms = max(1, interval_ms)
        timer = ManualTimer(self._now_ms + interval_ms, callback, interval_ms)
        self._push(timer)
        return timer

    def _push(self, timer: ManualTimer) -> None:
        heapq.heappush(self._queue, _Entry(timer.due_ms, next(self._seq), timer))

    def advance(self, ms: int) -> int:
        """Move time forward by ms, running every callback that falls due.

        Returns:
            Number of callbacks invoked
        """
        if ms < 0:
            raise ValueError("Cannot move virtual time backwards")
        return self.advance_to(self._now_ms + ms)

    def advance_to(self, t_ms: int) -> int:
        """Move time forward to t_ms, running every callback that falls due.

        Returns:
            Number of callbacks invoked
        """
        if t_ms < self._now_ms:
            raise ValueError("Cannot move virtual time backwards")

        fired = 0
        while self._queue and self._queue[0].due_ms <= t_ms:
            entry = heapq.heappop(self._queue)
            timer = entry.timer
            if timer.cancelled:
                continue

            self._now_ms = entry.due_ms
            if timer.periodic:
                timer.due_ms = entry.due_ms + timer.interval_ms
                self._push(timer)

            timer.callback()
            fired += 1

        self._now_ms = t_ms
        return fired

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) queued timers."""
        return sum(1 for entry in self._queue if not entry.timer.cancelled)
