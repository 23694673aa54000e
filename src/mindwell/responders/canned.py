"""Respuestas simuladas: elección uniforme de un conjunto fijo."""

from __future__ import annotations

import random
from collections.abc import Sequence

from mindwell.model import ChatMessage
from mindwell.responders.base import Responder

CANNED_REPLIES: tuple[str, ...] = (
    "I understand you're going through a tough time. Remember that it's okay "
    "to feel this way, and you're not alone.",
    "That sounds challenging. What's one small thing you could do today to "
    "take care of yourself?",
    "Thank you for sharing that with me. How are you feeling right now in "
    "this moment?",
    "It's great that you're reaching out. What support do you feel you need "
    "most right now?",
    "I hear you. Sometimes just talking about our feelings can help. What's "
    "been on your mind lately?",
    "That's a positive step forward. How can we build on this feeling?",
    "It's completely normal to have ups and downs. What usually helps you "
    "feel more grounded?",
)


class CannedResponder(Responder):
    """Placeholder responder; the reply ignores the transcript content."""

    def __init__(
        self,
        replies: Sequence[str] = CANNED_REPLIES,
        rng: random.Random | None = None,
    ) -> None:
        if not replies:
            raise ValueError("replies must not be empty")
        self._replies = tuple(replies)
        self._rng = rng or random.Random()

    def next_reply(self, history: Sequence[ChatMessage]) -> str:
        return self._rng.choice(self._replies)
