"""Clases base para estrategias de respuesta del chat."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from mindwell.model import ChatMessage

GREETING = "Hello! I'm here to support you. How are you feeling today?"
FALLBACK_REPLY = (
    "Sorry, I'm having trouble connecting right now. Please try again in a moment."
)


class Responder(ABC):
    """Strategy that produces the next reply for a transcript."""

    @abstractmethod
    def next_reply(self, history: Sequence[ChatMessage]) -> str:
        """Return the reply to append after ``history``.

        Args:
            history: Transcript so far, oldest first; the last item is the
                user message being answered.
        """
