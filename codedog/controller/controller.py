"""Animation Controller - Decides what the dog is doing at every instant.

Maps activity signals to a single displayed animation. Precedence,
highest first:

1. Death: a failed task locks the surface on Death until the cooldown ends
2. Start signals: task/debug start force Run and cancel the success hold
3. Temporary overrides: Bite, Sniff, Tracking, Bark, Blink (last one wins)
4. Success hold: Run for a fixed window after a successful task
5. Baseline: Walk while typing, IdleBlink otherwise

All delays are scheduled re-entries. Override expiry timers are never
cancelled; each carries the override epoch it was created under and does
nothing once a newer override (or a clear) has bumped the epoch. Death,
success-hold, bark and typing timers are cancelled explicitly.

Usage:
    controller = AnimationController(renderer, catalog, LoopScheduler())
    controller.start()

    controller.dispatch(EditChanged())
    controller.handle_message({"type": "taskEnded", "exitCode": 1})

    controller.dispose()
"""

from __future__ import annotations

import random
from typing import Any, Callable

from codedog.animation.base import (
    AnimationName,
    FrameResolver,
    Renderer,
    SetAnimation,
)
from codedog.config.constants import DOG
from codedog.config.settings import Settings, get_settings
from codedog.controller.signals import (
    ActiveEditorChanged,
    BranchSwitched,
    Clicked,
    Command,
    CommitDetected,
    DebugEnded,
    DebugStarted,
    DiagnosticsChanged,
    EditChanged,
    EditorClosed,
    RepositoryOpened,
    Saved,
    Signal,
    TaskEnded,
    TaskStarted,
    parse_signal,
)
from codedog.controller.state import ControllerState
from codedog.exceptions import (
    AssetUnavailableError,
    ControllerStateError,
    SignalError,
)
from codedog.observability.logging import ControllerLogger, get_logger
from codedog.observability.metrics import (
    record_bark,
    record_death,
    record_directive,
    record_directive_skipped,
    record_signal,
    record_signal_rejected,
    record_surface_end,
    record_surface_start,
)
from codedog.timing.scheduler import Scheduler, TimerHandle

logger = get_logger(__name__)

# Named timers
_TYPING = "typing"
_IDLE_TICK = "idle_tick"
_DEATH = "death"
_SUCCESS = "success"
_BARK = "bark"

# User commands: name -> (animation, duration)
COMMANDS: dict[str, tuple[AnimationName, int]] = {
    "codedog.testRun": (AnimationName.RUN, DOG.TEST_RUN_DURATION_MS),
    "codedog.testBite": (AnimationName.BITE, DOG.BITE_DURATION_MS),
}

OnComplete = Callable[[], None]


class AnimationController:
    """Priority resolver and timer owner for one presentation surface.

    Single-threaded: every public method and every scheduled callback must
    run on the scheduler's thread (the asyncio loop for LoopScheduler).
    """

    def __init__(
        self,
        renderer: Renderer,
        frames: FrameResolver,
        scheduler: Scheduler,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        surface_id: str = "default",
    ) -> None:
        self._renderer = renderer
        self._frames = frames
        self._scheduler = scheduler
        self._settings = settings or get_settings()
        self._rng = rng or random.Random()
        self._surface_id = surface_id

        self._state: ControllerState | None = None
        self._lifecycle = "created"  # created -> running -> disposed
        self._timers: dict[str, TimerHandle] = {}
        self._log = ControllerLogger(surface_id)

        self._handlers: dict[type, Callable[[Any], None]] = {
            EditChanged: self._on_edit,
            Saved: self._on_saved,
            EditorClosed: self._on_editor_switch,
            ActiveEditorChanged: self._on_editor_switch,
            DiagnosticsChanged: self._on_diagnostics,
            TaskStarted: self._on_start_signal,
            DebugStarted: self._on_start_signal,
            TaskEnded: self._on_task_ended,
            DebugEnded: self._on_debug_ended,
            Clicked: self._on_clicked,
            CommitDetected: self._on_commit,
            BranchSwitched: self._on_branch_switched,
            RepositoryOpened: self._on_repository_opened,
            Command: self._on_command,
        }

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Surface is ready: create state, show IdleBlink, start the idle tick.

        Raises:
            ControllerStateError: If already started or disposed
        """
        if self._lifecycle != "created":
            raise ControllerStateError(
                "Controller can only be started once",
                surface_id=self._surface_id,
                lifecycle=self._lifecycle,
            )

        self._state = ControllerState(last_activity_ms=self._now())
        self._lifecycle = "running"
        self._timers[_IDLE_TICK] = self._scheduler.call_every(
            DOG.IDLE_TICK_MS, self._on_idle_tick
        )
        self._set_animation(AnimationName.IDLE_BLINK)

        record_surface_start()
        self._log.controller_started({"size": self._settings.size})

    def dispose(self) -> int:
        """Cancel every outstanding timer and drop the state.

        Safe to call more than once.

        Returns:
            Number of timers cancelled
        """
        if self._lifecycle == "disposed":
            return 0

        was_running = self._lifecycle == "running"
        cancelled = len(self._timers)
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

        self._state = None
        self._lifecycle = "disposed"

        if was_running:
            record_surface_end()
        self._log.controller_disposed(cancelled)
        return cancelled

    async def __aenter__(self) -> "AnimationController":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.dispose()

    # -------------------------------------------------------------------------
    # Inbound
    # -------------------------------------------------------------------------

    def dispatch(self, signal: Signal) -> None:
        """Handle one inbound signal to completion."""
        if self._state is None:
            logger.debug(
                "signal_ignored",
                surface_id=self._surface_id,
                signal_type=signal.type,
                lifecycle=self._lifecycle,
            )
            return

        handler = self._handlers.get(type(signal))
        if handler is None:
            logger.warning("signal_unhandled", signal=repr(signal))
            return

        record_signal(signal.type)
        # Any activity starts a fresh idle period for blinks
        self._state.idle_blink_count = 0
        handler(signal)

    def handle_message(self, data: dict[str, Any] | str | bytes) -> bool:
        """Parse a wire message and dispatch it.

        Malformed messages are logged and dropped.

        Returns:
            True if the message was dispatched
        """
        try:
            signal = parse_signal(data)
        except SignalError as e:
            record_signal_rejected()
            self._log.signal_rejected(e.to_dict())
            return False

        self.dispatch(signal)
        return True

    def run_command(self, name: str) -> bool:
        """Run a named user command.

        Returns:
            True if the command exists and played
        """
        if self._state is None:
            return False

        command = COMMANDS.get(name)
        if command is None:
            logger.warning("unknown_command", surface_id=self._surface_id, command=name)
            return False

        animation, duration_ms = command
        return self.play_temporary(animation, duration_ms)

    def update_settings(self, settings: Settings) -> None:
        """Swap settings; applies from the next rule evaluation on."""
        self._settings = settings

    # -------------------------------------------------------------------------
    # Override scheduler
    # -------------------------------------------------------------------------

    def play_temporary(
        self,
        name: AnimationName,
        duration_ms: int,
        on_complete: OnComplete | None = None,
    ) -> bool:
        """Show name for duration_ms, then revert.

        Preempts any in-flight override. On expiry runs on_complete, or
        falls back to the success hold / baseline when none is given.

        Returns:
            False if a death lock (or disposal) prevented the override
        """
        state = self._state
        if state is None or state.death_locked:
            return False

        duration_ms = max(0, int(duration_ms))
        state.override_epoch += 1
        epoch = state.override_epoch
        state.temp_hold_until = self._now() + duration_ms

        self._set_animation(name, force=True)
        self._log.override_started(name.value, duration_ms, epoch)

        self._timers[f"override:{epoch}"] = self._scheduler.call_later(
            duration_ms,
            lambda: self._on_override_expired(epoch, on_complete),
        )
        return True

    def _on_override_expired(self, epoch: int, on_complete: OnComplete | None) -> None:
        self._timers.pop(f"override:{epoch}", None)
        state = self._state
        if state is None or state.override_epoch != epoch:
            return  # superseded

        state.temp_hold_until = None
        if on_complete is not None:
            on_complete()
        else:
            self._revert()

    def _clear_override(self) -> None:
        """Drop the current override; its expiry timer becomes stale."""
        state = self._state
        if state.temp_hold_until is not None:
            state.temp_hold_until = None
            state.override_epoch += 1

    # -------------------------------------------------------------------------
    # Priority resolution
    # -------------------------------------------------------------------------

    def _baseline(self) -> AnimationName:
        idle_for = self._now() - self._state.last_activity_ms
        if idle_for > DOG.IDLE_THRESHOLD_MS:
            return AnimationName.IDLE_BLINK
        return AnimationName.WALK

    def _revert(self) -> None:
        """Apply whatever ranks below the override tier."""
        state = self._state
        if state.death_locked:
            return
        if state.success_run_active:
            self._set_animation(AnimationName.RUN)
            return
        self._apply_baseline()

    def _apply_baseline(self) -> None:
        name = self._baseline()
        if name is AnimationName.WALK:
            # Walk only lasts until the watchdog moves the dog to IdleBlink
            remaining = (
                self._state.last_activity_ms + DOG.TYPING_WATCHDOG_MS - self._now()
            )
            self._schedule(_TYPING, remaining, self._on_typing_stopped)
        self._set_animation(name)

    def _baseline_blocked(self) -> bool:
        state = self._state
        return (
            state.death_locked
            or state.success_run_active
            or state.temp_active(self._now())
        )

    def _set_animation(self, name: AnimationName, force: bool = False) -> bool:
        """Send a directive unless it is redundant, locked out or has no frames."""
        state = self._state
        if state is None:
            return False
        if state.death_locked and name is not AnimationName.DEATH:
            return False
        if not force and state.current_animation is name:
            return False

        try:
            directive = SetAnimation.for_animation(name, self._frames_for(name))
        except AssetUnavailableError as e:
            self._log.directive_skipped(name.value, "asset_unavailable", e.to_dict())
            record_directive_skipped("asset_unavailable")
            return False

        previous = state.current_animation
        try:
            self._renderer.set_animation(directive)
        except Exception as e:
            logger.warning(
                "renderer_error",
                surface_id=self._surface_id,
                animation=name.value,
                error=str(e),
            )
            return False

        state.current_animation = name
        record_directive(name.value)
        self._log.directive_issued(
            name.value,
            previous.value if previous else None,
            force,
            self._now(),
        )
        return True

    def _frames_for(self, name: AnimationName) -> list[str]:
        frames = self._frames.resolve(name)
        if not frames:
            raise AssetUnavailableError(name.value)
        return frames

    # -------------------------------------------------------------------------
    # Activity tracking
    # -------------------------------------------------------------------------

    def _on_edit(self, signal: EditChanged) -> None:
        state = self._state
        state.last_activity_ms = self._now()
        self._schedule(_TYPING, DOG.TYPING_WATCHDOG_MS, self._on_typing_stopped)

        if state.death_locked:
            return

        if max(0, signal.deletion_size) >= DOG.BITE_DELETION_THRESHOLD:
            self.play_temporary(AnimationName.BITE, DOG.BITE_DURATION_MS)
            return

        if not self._baseline_blocked():
            self._set_animation(AnimationName.WALK)

    def _on_typing_stopped(self) -> None:
        self._timers.pop(_TYPING, None)
        if self._state is None or self._baseline_blocked():
            return
        self._set_animation(AnimationName.IDLE_BLINK)

    def _on_idle_tick(self) -> None:
        state = self._state
        if state is None or self._baseline_blocked():
            return

        idle_for = self._now() - state.last_activity_ms
        if idle_for <= self._settings.idle_timeout_ms:
            return
        if state.idle_blink_count >= DOG.MAX_IDLE_BLINKS:
            return
        if self._rng.random() >= self._settings.idle_blink_probability:
            return

        state.idle_blink_count += 1
        self.play_temporary(
            AnimationName.BLINK,
            DOG.BLINK_DURATION_MS,
            on_complete=self._settle_idle,
        )

    def _settle_idle(self) -> None:
        if self._state.success_run_active:
            self._revert()
            return
        self._set_animation(AnimationName.IDLE_BLINK)

    # -------------------------------------------------------------------------
    # Temporary override signals
    # -------------------------------------------------------------------------

    def _on_saved(self, signal: Saved) -> None:
        self.play_temporary(AnimationName.SNIFF, DOG.SNIFF_DURATION_MS)

    def _on_editor_switch(self, signal: EditorClosed | ActiveEditorChanged) -> None:
        self.play_temporary(AnimationName.TRACKING, DOG.TRACKING_DURATION_MS)
        self._check_diagnostics()

    def _on_clicked(self, signal: Clicked) -> None:
        state = self._state
        if state.death_locked:
            return

        now = self._now()
        if state.last_click_ms is not None and now - state.last_click_ms <= DOG.CLICK_COOLDOWN_MS:
            return

        state.last_click_ms = now
        if self.play_temporary(AnimationName.BARK, DOG.CLICK_BARK_DURATION_MS):
            record_bark("click")

    def _on_commit(self, signal: CommitDetected) -> None:
        self.play_temporary(AnimationName.RUN, DOG.COMMIT_RUN_DURATION_MS)

    def _on_branch_switched(self, signal: BranchSwitched) -> None:
        self.play_temporary(AnimationName.TRACKING, DOG.BRANCH_TRACKING_DURATION_MS)

    def _on_repository_opened(self, signal: RepositoryOpened) -> None:
        self.play_temporary(AnimationName.SNIFF, DOG.REPOSITORY_SNIFF_DURATION_MS)

    def _on_command(self, signal: Command) -> None:
        self.run_command(signal.name)

    # -------------------------------------------------------------------------
    # Task and debug lifecycle
    # -------------------------------------------------------------------------

    def _on_start_signal(self, signal: TaskStarted | DebugStarted) -> None:
        if self._state.death_locked:
            return

        self._cancel_success_hold()
        self._clear_override()
        self._set_animation(AnimationName.RUN, force=True)

    def _on_debug_ended(self, signal: DebugEnded) -> None:
        if self._baseline_blocked():
            return
        self._apply_baseline()

    def _on_task_ended(self, signal: TaskEnded) -> None:
        if signal.succeeded:
            self._start_success_hold()
        else:
            self._enter_death(signal.exit_code)

    def _enter_death(self, exit_code: int) -> None:
        state = self._state
        cooldown_ms = self._settings.death_cooldown_ms

        if state.death_locked:
            # Another failure restarts the cooldown
            self._schedule(_DEATH, cooldown_ms, self._on_death_recovered)
            return

        self._cancel_success_hold()
        self._cancel_bark("death")
        self._clear_override()

        self._set_animation(AnimationName.DEATH, force=True)
        state.death_locked = True
        self._schedule(_DEATH, cooldown_ms, self._on_death_recovered)

        record_death()
        self._log.death_entered(exit_code, cooldown_ms)

    def _on_death_recovered(self) -> None:
        self._timers.pop(_DEATH, None)
        state = self._state
        if state is None or not state.death_locked:
            return

        state.death_locked = False
        self._log.death_recovered()
        if not state.temp_active(self._now()):
            self._revert()

    def _start_success_hold(self) -> None:
        state = self._state
        if state.death_locked:
            return

        self._cancel(_SUCCESS)
        state.success_run_active = True
        self._schedule(
            _SUCCESS, DOG.SUCCESS_RUN_DURATION_MS, self._on_success_hold_expired
        )

        # An override in flight keeps the surface; Run follows on its expiry
        if not state.temp_active(self._now()):
            self._set_animation(AnimationName.RUN, force=True)
        self._log.success_hold_started(DOG.SUCCESS_RUN_DURATION_MS)

    def _on_success_hold_expired(self) -> None:
        self._timers.pop(_SUCCESS, None)
        state = self._state
        if state is None or not state.success_run_active:
            return

        state.success_run_active = False
        if not state.death_locked and not state.temp_active(self._now()):
            self._revert()

    def _cancel_success_hold(self) -> None:
        self._cancel(_SUCCESS)
        self._state.success_run_active = False

    # -------------------------------------------------------------------------
    # Diagnostic bark gate
    # -------------------------------------------------------------------------

    def _on_diagnostics(self, signal: DiagnosticsChanged) -> None:
        self._state.diagnostics = signal
        self._check_diagnostics()

    def _check_diagnostics(self) -> None:
        state = self._state
        if not self._settings.enable_bark:
            return
        if state.death_locked or state.success_run_active:
            return

        if not state.diagnostics.has_issue:
            self._cancel_bark("resolved")
            return

        if state.bark_pending or self._now() < state.next_bark_allowed_at:
            return

        delay_ms = self._settings.bark_delay_ms
        state.bark_pending = True
        self._schedule(_BARK, delay_ms, self._on_bark_check)
        self._log.bark_scheduled(delay_ms)

    def _on_bark_check(self) -> None:
        self._timers.pop(_BARK, None)
        state = self._state
        if state is None:
            return

        state.bark_pending = False
        if state.death_locked or state.success_run_active:
            return
        if not self._settings.enable_bark or not state.diagnostics.has_issue:
            return

        if self.play_temporary(AnimationName.BARK, DOG.BARK_DURATION_MS):
            state.next_bark_allowed_at = self._now() + DOG.BARK_COOLDOWN_MS
            record_bark("diagnostics")
            self._log.bark_fired(state.next_bark_allowed_at)

    def _cancel_bark(self, reason: str) -> None:
        state = self._state
        if not state.bark_pending:
            return
        self._cancel(_BARK)
        state.bark_pending = False
        self._log.bark_cancelled(reason)

    # -------------------------------------------------------------------------
    # Timer bookkeeping
    # -------------------------------------------------------------------------

    def _schedule(self, key: str, delay_ms: int, callback: Callable[[], None]) -> None:
        """(Re)arm a named one-shot timer."""
        self._cancel(key)
        self._timers[key] = self._scheduler.call_later(max(0, delay_ms), callback)

    def _cancel(self, key: str) -> None:
        handle = self._timers.pop(key, None)
        if handle is not None:
            handle.cancel()

    def _now(self) -> int:
        return self._scheduler.now_ms()

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ControllerState | None:
        """Current state (None before start and after dispose)."""
        return self._state

    @property
    def current_animation(self) -> AnimationName | None:
        """Last animation sent to the renderer."""
        return self._state.current_animation if self._state else None

    @property
    def surface_id(self) -> str:
        """Surface identifier."""
        return self._surface_id

    @property
    def settings(self) -> Settings:
        """Settings in effect."""
        return self._settings

    @property
    def is_running(self) -> bool:
        """Whether start() has run and dispose() has not."""
        return self._lifecycle == "running"

    @property
    def pending_timers(self) -> int:
        """Number of timers currently tracked."""
        return len(self._timers)
