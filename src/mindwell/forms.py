"""Validación de formularios: entradas incompletas se descartan en silencio."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from mindwell.model import Mood
from mindwell.sleep import parse_clock

DIFFICULTY_OPTIONS: tuple[str, ...] = ("beginner", "intermediate", "advanced")
DURATION_OPTIONS: tuple[str, ...] = (
    "1 week",
    "2 weeks",
    "1 month",
    "3 months",
    "6 months",
)


@dataclass(frozen=True)
class MoodForm:
    mood: Mood
    notes: str


@dataclass(frozen=True)
class SleepForm:
    bedtime: time
    wake_time: time
    quality: int


@dataclass(frozen=True)
class StudyForm:
    subject: str
    duration: str
    difficulty: str
    goals: str


def parse_mood_form(mood: str | Mood | None, notes: str | None) -> MoodForm | None:
    """Return a validated mood submission, or None if no mood was chosen."""
    if mood is None or mood == "":
        return None
    try:
        value = Mood(mood)
    except ValueError:
        return None
    return MoodForm(mood=value, notes=(notes or "").strip())


def parse_sleep_form(
    bedtime: str | time | None,
    wake_time: str | time | None,
    quality: int | str | None,
) -> SleepForm | None:
    """Return a validated sleep submission.

    Missing or unparseable times and a quality outside 1-5 (including the
    unset value 0) are rejected.
    """
    bed = _coerce_time(bedtime)
    wake = _coerce_time(wake_time)
    if bed is None or wake is None:
        return None
    try:
        score = int(quality) if quality is not None else 0
    except (TypeError, ValueError):
        return None
    if not 1 <= score <= 5:
        return None
    return SleepForm(bedtime=bed, wake_time=wake, quality=score)


def parse_chat_text(text: str | None) -> str | None:
    if text is None or not text.strip():
        return None
    return text


def parse_study_form(
    subject: str | None,
    duration: str | None,
    difficulty: str | None,
    goals: str | None = None,
) -> StudyForm | None:
    """Subject, duration and difficulty are required; goals are optional."""
    subject_text = (subject or "").strip()
    if not subject_text or not duration or not difficulty:
        return None
    return StudyForm(
        subject=subject_text,
        duration=duration,
        difficulty=difficulty,
        goals=(goals or "").strip(),
    )


def _coerce_time(value: str | time | None) -> time | None:
    if value is None:
        return None
    if isinstance(value, time):
        return value
    try:
        return parse_clock(value)
    except ValueError:
        return None
