"""CodeDog Constants - Timing and policy thresholds.

These values define the behavioural contract of the animation controller.
User-tunable values (idle timeout, bark delay, death cooldown) live in
Settings; everything here is fixed.

All timing values in milliseconds unless otherwise noted.
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class DogConstants:
    """Immutable controller thresholds."""

    # Activity tracking
    IDLE_THRESHOLD_MS: Final[int] = 200  # Walk vs IdleBlink baseline boundary
    TYPING_WATCHDOG_MS: Final[int] = 200  # Revert to IdleBlink after last edit
    IDLE_TICK_MS: Final[int] = 500  # Sustained-idle check interval

    # Idle blink
    MAX_IDLE_BLINKS: Final[int] = 3  # Per idle episode
    IDLE_BLINK_PROBABILITY: Final[float] = 0.30  # Per tick
    BLINK_DURATION_MS: Final[int] = 800

    # Temporary overrides
    SNIFF_DURATION_MS: Final[int] = 900  # Saved
    TRACKING_DURATION_MS: Final[int] = 700  # Editor switch/close
    BITE_DURATION_MS: Final[int] = 800  # Large deletion
    BITE_DELETION_THRESHOLD: Final[int] = 50  # Characters removed in one edit

    # Task outcome
    SUCCESS_RUN_DURATION_MS: Final[int] = 10000

    # Diagnostic bark
    BARK_DURATION_MS: Final[int] = 1200
    BARK_COOLDOWN_MS: Final[int] = 30000

    # Click
    CLICK_BARK_DURATION_MS: Final[int] = 1000
    CLICK_COOLDOWN_MS: Final[int] = 2000

    # Repository activity
    COMMIT_RUN_DURATION_MS: Final[int] = 2000
    BRANCH_TRACKING_DURATION_MS: Final[int] = 1500
    REPOSITORY_SNIFF_DURATION_MS: Final[int] = 1000

    # Test commands
    TEST_RUN_DURATION_MS: Final[int] = 3000

    # Settings defaults
    DEFAULT_SIZE_PX: Final[int] = 120
    DEFAULT_IDLE_TIMEOUT_MS: Final[int] = 10000
    DEFAULT_BARK_DELAY_MS: Final[int] = 5000
    DEFAULT_DEATH_COOLDOWN_MS: Final[int] = 5000


# Singleton instance for import convenience
DOG = DogConstants()
