from __future__ import annotations

from datetime import date, time, timedelta

import pandas as pd

from mindwell.entries import EntryStore
from mindwell.model import Mood
from mindwell.stats import (
    SleepSummary,
    daily_summary,
    latest_mood,
    latest_sleep,
    mood_frame,
    sleep_frame,
    streak,
)

TODAY = date(2026, 10, 17)


class _Clock:
    def __init__(self, day: date) -> None:
        self.day = day

    def __call__(self) -> date:
        return self.day


def test_latest_mood_unset_when_empty() -> None:
    assert latest_mood(EntryStore()) is None


def test_latest_mood_follows_most_recent_entry() -> None:
    store = EntryStore(today=lambda: TODAY)
    for mood in (Mood.GREAT, Mood.TERRIBLE, Mood.OKAY):
        store.record_mood(mood)
        assert latest_mood(store) is mood


def test_latest_sleep_defaults_when_empty() -> None:
    assert latest_sleep(EntryStore()) == SleepSummary(quality=0, duration=0.0)


def test_latest_sleep_uses_newest_entry() -> None:
    store = EntryStore(today=lambda: TODAY)
    store.record_sleep(time(22, 0), time(6, 0), 2)
    store.record_sleep(time(23, 30), time(7, 0), 5)
    assert latest_sleep(store) == SleepSummary(quality=5, duration=7.5)


def test_reads_are_idempotent() -> None:
    store = EntryStore(today=lambda: TODAY)
    store.record_mood(Mood.GOOD)
    store.record_sleep(time(23, 0), time(7, 0), 4)
    assert latest_mood(store) == latest_mood(store)
    assert latest_sleep(store) == latest_sleep(store)
    assert streak(store, TODAY) == streak(store, TODAY)
    pd.testing.assert_frame_equal(daily_summary(store), daily_summary(store))


def test_streak_zero_without_entries() -> None:
    assert streak(EntryStore(), TODAY) == 0


def test_streak_counts_consecutive_days_with_any_entry() -> None:
    clock = _Clock(TODAY - timedelta(days=2))
    store = EntryStore(today=clock)
    store.record_mood(Mood.OKAY)
    clock.day = TODAY - timedelta(days=1)
    store.record_sleep(time(23, 0), time(7, 0), 3)
    clock.day = TODAY
    store.record_mood(Mood.GOOD)
    store.record_mood(Mood.GREAT)
    assert streak(store, TODAY) == 3


def test_streak_stops_at_first_gap() -> None:
    clock = _Clock(TODAY - timedelta(days=5))
    store = EntryStore(today=clock)
    store.record_mood(Mood.BAD)
    clock.day = TODAY - timedelta(days=1)
    store.record_mood(Mood.OKAY)
    clock.day = TODAY
    store.record_mood(Mood.GOOD)
    assert streak(store, TODAY) == 2


def test_streak_zero_when_today_missing() -> None:
    store = EntryStore(today=lambda: TODAY - timedelta(days=1))
    store.record_mood(Mood.GOOD)
    assert streak(store, TODAY) == 0


def test_frames_are_oldest_first() -> None:
    clock = _Clock(TODAY - timedelta(days=1))
    store = EntryStore(today=clock)
    store.record_mood(Mood.BAD, "first")
    store.record_sleep(time(23, 0), time(6, 30), 2)
    clock.day = TODAY
    store.record_mood(Mood.GREAT, "second")

    moods = mood_frame(store)
    assert list(moods["notes"]) == ["first", "second"]
    assert list(moods["mood_score"]) == [2, 5]

    sleeps = sleep_frame(store)
    assert list(sleeps.columns) == ["date", "bedtime", "wake_time", "quality", "duration"]
    assert sleeps.loc[0, "bedtime"] == "23:00"
    assert sleeps.loc[0, "duration"] == 7.5


def test_empty_frames_keep_columns() -> None:
    store = EntryStore()
    assert list(mood_frame(store).columns) == ["date", "mood", "mood_score", "notes"]
    assert sleep_frame(store).empty
    summary = daily_summary(store)
    assert summary.empty
    assert list(summary.columns) == [
        "date",
        "mood_count",
        "mood_avg",
        "sleep_hours",
        "sleep_quality",
    ]


def test_daily_summary_merges_both_histories() -> None:
    clock = _Clock(TODAY - timedelta(days=1))
    store = EntryStore(today=clock)
    store.record_sleep(time(23, 0), time(7, 0), 4)
    clock.day = TODAY
    store.record_mood(Mood.GOOD)
    store.record_mood(Mood.OKAY)
    store.record_sleep(time(0, 0), time(6, 0), 3)

    out = daily_summary(store)
    assert list(out["date"]) == [TODAY - timedelta(days=1), TODAY]
    assert out.loc[0, "mood_count"] == 0
    assert pd.isna(out.loc[0, "mood_avg"])
    assert out.loc[0, "sleep_hours"] == 8.0
    assert out.loc[1, "mood_count"] == 2
    assert out.loc[1, "mood_avg"] == 3.5
    assert out.loc[1, "sleep_quality"] == 3.0


def test_daily_summary_mood_only() -> None:
    store = EntryStore(today=lambda: TODAY)
    store.record_mood(Mood.TERRIBLE)
    out = daily_summary(store)
    assert len(out) == 1
    assert out.loc[0, "mood_avg"] == 1.0
    assert pd.isna(out.loc[0, "sleep_hours"])
