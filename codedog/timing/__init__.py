"""Time sources and schedulers."""

from codedog.timing.clock import MonotonicClock, get_clock
from codedog.timing.manual import ManualScheduler, ManualTimer
from codedog.timing.scheduler import (
    LoopScheduler,
    PeriodicTask,
    Scheduler,
    TimerHandle,
)

__all__ = [
    "LoopScheduler",
    "ManualScheduler",
    "ManualTimer",
    "MonotonicClock",
    "PeriodicTask",
    "Scheduler",
    "TimerHandle",
    "get_clock",
]
