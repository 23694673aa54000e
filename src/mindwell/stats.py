"""Estadísticas derivadas del historial (se recalculan en cada lectura)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

import pandas as pd

from mindwell.entries import EntryStore
from mindwell.model import Mood

MOOD_COLUMNS = ["date", "mood", "mood_score", "notes"]
SLEEP_COLUMNS = ["date", "bedtime", "wake_time", "quality", "duration"]
SUMMARY_COLUMNS = ["date", "mood_count", "mood_avg", "sleep_hours", "sleep_quality"]


@dataclass(frozen=True)
class SleepSummary:
    """Quality and duration of the most recent night."""

    quality: int = 0
    duration: float = 0.0


def latest_mood(store: EntryStore) -> Mood | None:
    """Mood of the newest entry, or None when nothing was logged yet."""
    history = store.mood_history
    return history[0].mood if history else None


def latest_sleep(store: EntryStore) -> SleepSummary:
    history = store.sleep_history
    if not history:
        return SleepSummary()
    newest = history[0]
    return SleepSummary(quality=newest.quality, duration=newest.duration)


def streak(store: EntryStore, today: date) -> int:
    """Count consecutive days, ending today, with at least one entry.

    Walks backward from ``today`` and stops at the first day with neither a
    mood nor a sleep entry.
    """
    days = {e.date for e in store.mood_history}
    days.update(e.date for e in store.sleep_history)
    count = 0
    day = today
    while day in days:
        count += 1
        day -= timedelta(days=1)
    return count


def mood_frame(store: EntryStore) -> pd.DataFrame:
    """Mood history as a DataFrame, oldest first."""
    rows = [
        {
            "date": e.date,
            "mood": e.mood.value,
            "mood_score": e.mood.score,
            "notes": e.notes,
        }
        for e in reversed(store.mood_history)
    ]
    if not rows:
        return pd.DataFrame(columns=MOOD_COLUMNS)
    return pd.DataFrame(rows, columns=MOOD_COLUMNS)


def sleep_frame(store: EntryStore) -> pd.DataFrame:
    """Sleep history as a DataFrame, oldest first."""
    rows = [
        {
            "date": e.date,
            "bedtime": e.bedtime.strftime("%H:%M"),
            "wake_time": e.wake_time.strftime("%H:%M"),
            "quality": e.quality,
            "duration": e.duration,
        }
        for e in reversed(store.sleep_history)
    ]
    if not rows:
        return pd.DataFrame(columns=SLEEP_COLUMNS)
    return pd.DataFrame(rows, columns=SLEEP_COLUMNS)


def daily_summary(store: EntryStore) -> pd.DataFrame:
    """Aggregate both histories by day.

    Days present in either history get one row; a missing side is NaN
    (mood_count is 0 on days with sleep only).

    Returns:
        DataFrame with date, mood_count, mood_avg, sleep_hours, sleep_quality.
    """
    moods = mood_frame(store)
    sleeps = sleep_frame(store)
    if moods.empty and sleeps.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    if moods.empty:
        mood_daily = pd.DataFrame(columns=["date", "mood_count", "mood_avg"])
    else:
        mood_daily = moods.groupby("date", as_index=False).agg(
            mood_count=("mood_score", "count"),
            mood_avg=("mood_score", "mean"),
        )

    if sleeps.empty:
        sleep_daily = pd.DataFrame(columns=["date", "sleep_hours", "sleep_quality"])
    else:
        sleep_daily = sleeps.groupby("date", as_index=False).agg(
            sleep_hours=("duration", "sum"),
            sleep_quality=("quality", "mean"),
        )

    out = mood_daily.merge(sleep_daily, on="date", how="outer")
    out["mood_count"] = out["mood_count"].fillna(0).astype(int)
    for col in ("mood_avg", "sleep_hours", "sleep_quality"):
        out[col] = pd.to_numeric(out[col], errors="coerce").round(2)
    return out.sort_values("date").reset_index(drop=True)[SUMMARY_COLUMNS]
