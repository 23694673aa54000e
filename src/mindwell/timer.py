"""Temporizador de meditación: transiciones puras y driver con scheduler."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum

from mindwell.scheduler import Handle, Scheduler

logger = logging.getLogger(__name__)

PRESETS: tuple[int, ...] = (300, 600, 900)
DEFAULT_DURATION = PRESETS[0]
TICK_SECONDS = 1.0


class Phase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class TimerState:
    """Countdown snapshot; remaining stays within [0, configured_duration]."""

    configured_duration: int = DEFAULT_DURATION
    remaining: int = DEFAULT_DURATION
    running: bool = False
    paused: bool = False

    @property
    def phase(self) -> Phase:
        if self.running:
            return Phase.RUNNING
        if self.paused:
            return Phase.PAUSED
        return Phase.IDLE


def initial_state(duration: int = DEFAULT_DURATION) -> TimerState:
    _check_duration(duration)
    return TimerState(configured_duration=duration, remaining=duration)


def select_duration(state: TimerState, duration: int) -> TimerState:
    """Change the session length; ignored while running, resets otherwise."""
    _check_duration(duration)
    if state.running:
        return state
    return TimerState(configured_duration=duration, remaining=duration)


def start(state: TimerState) -> TimerState:
    if state.running:
        return state
    return replace(state, running=True, paused=False)


def pause(state: TimerState) -> TimerState:
    if not state.running:
        return state
    return replace(state, running=False, paused=True)


def tick(state: TimerState) -> TimerState:
    """One elapsed second. Reaching zero completes the session and resets."""
    if not state.running:
        return state
    remaining = state.remaining - 1
    if remaining <= 0:
        return reset(state)
    return replace(state, remaining=remaining)


def reset(state: TimerState) -> TimerState:
    return TimerState(
        configured_duration=state.configured_duration,
        remaining=state.configured_duration,
    )


def format_clock(seconds: int) -> str:
    """Render seconds as MM:SS."""
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"


def _check_duration(duration: int) -> None:
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        raise ValueError(f"duration must be a positive number of seconds: {duration!r}")


class MeditationTimer:
    """Owns a TimerState and the one-second tick task while running.

    The tick task only exists in the running phase; pause, reset, completion
    and close all cancel it.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        duration: int = DEFAULT_DURATION,
        on_change: Callable[[TimerState], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._state = initial_state(duration)
        self._task: Handle | None = None
        self.on_change = on_change
        self.on_complete = on_complete

    @property
    def state(self) -> TimerState:
        return self._state

    def select_duration(self, duration: int) -> None:
        self._apply(select_duration(self._state, duration))

    def start(self) -> None:
        if self._state.running:
            return
        self._apply(start(self._state))
        self._task = self._scheduler.call_every(TICK_SECONDS, self.tick)

    def pause(self) -> None:
        self._cancel_task()
        self._apply(pause(self._state))

    def tick(self) -> None:
        if not self._state.running:
            return
        completes = self._state.remaining <= 1
        self._apply(tick(self._state))
        if completes:
            self._cancel_task()
            logger.info(
                "Meditation session of %ss complete", self._state.configured_duration
            )
            if self.on_complete is not None:
                self.on_complete()

    def reset(self) -> None:
        self._cancel_task()
        self._apply(reset(self._state))

    def close(self) -> None:
        """Suspend the countdown when the driving view is torn down."""
        self.pause()

    def _cancel_task(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _apply(self, new_state: TimerState) -> None:
        if new_state == self._state:
            return
        self._state = new_state
        if self.on_change is not None:
            self.on_change(new_state)
