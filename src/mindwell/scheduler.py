"""Planificadores de callbacks diferidos y periódicos (manual y Kivy Clock)."""

from __future__ import annotations

import heapq
import itertools
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any


class Handle(ABC):
    """Cancellable scheduled callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the callback from firing again. Safe to call twice."""


class Scheduler(ABC):
    """Source of delayed and repeating callbacks."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle:
        """Run ``callback`` once after ``delay`` seconds."""

    @abstractmethod
    def call_every(self, interval: float, callback: Callable[[], None]) -> Handle:
        """Run ``callback`` every ``interval`` seconds until cancelled."""


class _ManualHandle(Handle):
    def __init__(self, interval: float | None) -> None:
        self.interval = interval
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Deterministic scheduler driven by ``advance``.

    Time only moves when ``advance`` is called, so tests can step a one
    second timer exactly N times.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, _ManualHandle, Callable[[], None]]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle:
        handle = _ManualHandle(None)
        self._push(self.now + delay, handle, callback)
        return handle

    def call_every(self, interval: float, callback: Callable[[], None]) -> Handle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = _ManualHandle(interval)
        self._push(self.now + interval, handle, callback)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h, _ in self._queue if not h.cancelled)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in time order."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = due
            if handle.interval is not None:
                self._push(due + handle.interval, handle, callback)
            callback()
        self.now = target

    def _push(
        self, due: float, handle: _ManualHandle, callback: Callable[[], None]
    ) -> None:
        heapq.heappush(self._queue, (due, next(self._seq), handle, callback))


class _ClockHandle(Handle):
    def __init__(self, event: Any) -> None:
        self._event = event

    def cancel(self) -> None:
        self._event.cancel()


class KivyScheduler(Scheduler):
    """Scheduler backed by ``kivy.clock.Clock`` for the GUI event loop."""

    def __init__(self) -> None:
        from kivy.clock import Clock

        self._clock = Clock

    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle:
        event = self._clock.schedule_once(lambda _dt: callback(), delay)
        return _ClockHandle(event)

    def call_every(self, interval: float, callback: Callable[[], None]) -> Handle:
        event = self._clock.schedule_interval(lambda _dt: callback(), interval)
        return _ClockHandle(event)
