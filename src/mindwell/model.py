"""Modelos tipados para registros de ánimo, sueño, chat y planes de estudio."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum


class Mood(str, Enum):
    """Five-point ordinal mood scale."""

    TERRIBLE = "terrible"
    BAD = "bad"
    OKAY = "okay"
    GOOD = "good"
    GREAT = "great"

    @property
    def score(self) -> int:
        """Ordinal value 1 (terrible) to 5 (great)."""
        return list(Mood).index(self) + 1


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class MoodEntry:
    """One mood observation (day granularity)."""

    id: str
    date: date
    mood: Mood
    notes: str = ""


@dataclass(frozen=True)
class SleepEntry:
    """One night of sleep as logged by the user."""

    id: str
    date: date
    bedtime: time
    wake_time: time
    quality: int
    duration: float


@dataclass(frozen=True)
class ChatMessage:
    """A transcript line, either from the user or from the responder."""

    id: str
    text: str
    is_user: bool
    timestamp: datetime


@dataclass(frozen=True)
class StudyPlan:
    """Generated study plan kept for the session."""

    id: str
    subject: str
    duration: str
    difficulty: str
    goals: str
    plan: str
    timestamp: datetime
