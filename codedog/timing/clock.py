"""Monotonic Clock - Time source for the live scheduler.

All controller timestamps are integer milliseconds on a monotonic clock.
Wall-clock time is never used: a system clock change must not expire a
death lock early or hold a bark cooldown forever.

Platform notes:
- Linux: CLOCK_MONOTONIC via time.monotonic_ns()
- Windows: QueryPerformanceCounter
- macOS: mach_absolute_time
"""

import threading
import time
from typing import Final


class MonotonicClock:
    """Process-wide monotonic millisecond clock.

    Thread-safe singleton; timestamps are relative to the first time the
    clock was created in this process.

    Usage:
        clock = get_clock()
        t_ms = clock.now_ms()
    """

    # Singleton instance
    _instance: "MonotonicClock | None" = None
    _lock: threading.Lock = threading.Lock()

    # Nanoseconds per millisecond
    NS_PER_MS: Final[int] = 1_000_000

    def __new__(cls) -> "MonotonicClock":
        """Ensure singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._init_clock()
                    cls._instance = instance
        return cls._instance

    def _init_clock(self) -> None:
        """Initialize clock state."""
        self._process_start_ns = time.monotonic_ns()

    def _now_ns(self) -> int:
        """Get current monotonic time in nanoseconds."""
        return time.monotonic_ns()

    def now_ms(self) -> int:
        """Milliseconds since the clock was created."""
        elapsed_ns = self._now_ns() - self._process_start_ns
        return elapsed_ns // self.NS_PER_MS


# Module-level singleton accessor
_clock: MonotonicClock | None = None


def get_clock() -> MonotonicClock:
    """Get the global clock instance."""
    global _clock
    if _clock is None:
        _clock = MonotonicClock()
    return _clock
