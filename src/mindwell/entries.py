"""Historial en memoria de registros de ánimo y sueño (más reciente primero)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time

from dateutil import tz

from mindwell.model import Mood, MoodEntry, SleepEntry, new_id
from mindwell.sleep import sleep_duration


def local_today() -> date:
    return datetime.now(tz=tz.tzlocal()).date()


class EntryStore:
    """Append-only mood and sleep history owned by one tracking session.

    Inputs are expected to be validated by the caller (see ``mindwell.forms``);
    the store never rejects an entry.
    """

    def __init__(self, today: Callable[[], date] = local_today) -> None:
        self._today = today
        self._moods: list[MoodEntry] = []
        self._sleeps: list[SleepEntry] = []

    @property
    def mood_history(self) -> tuple[MoodEntry, ...]:
        return tuple(self._moods)

    @property
    def sleep_history(self) -> tuple[SleepEntry, ...]:
        return tuple(self._sleeps)

    def record_mood(self, mood: Mood, notes: str = "") -> MoodEntry:
        """Stamp a mood with today's date and prepend it to the history."""
        entry = MoodEntry(id=new_id(), date=self._today(), mood=mood, notes=notes)
        self._moods.insert(0, entry)
        return entry

    def record_sleep(self, bedtime: time, wake_time: time, quality: int) -> SleepEntry:
        """Compute the night's duration and prepend the entry to the history."""
        entry = SleepEntry(
            id=new_id(),
            date=self._today(),
            bedtime=bedtime,
            wake_time=wake_time,
            quality=quality,
            duration=sleep_duration(bedtime, wake_time),
        )
        self._sleeps.insert(0, entry)
        return entry
