"""Relay de conversación: transcripción en memoria y respuesta diferida."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from dateutil import tz

from mindwell.forms import parse_chat_text
from mindwell.model import ChatMessage, new_id
from mindwell.responders.base import FALLBACK_REPLY, GREETING, Responder
from mindwell.scheduler import Handle, Scheduler

logger = logging.getLogger(__name__)

DEFAULT_LATENCY_S = 1.0

# Runs the reply computation and hands the text to the completion callback.
ReplyRunner = Callable[[Callable[[], str], Callable[[str], None]], None]


def run_inline(compute: Callable[[], str], done: Callable[[str], None]) -> None:
    done(compute())


class ConversationRelay:
    """Append-only transcript with one reply per accepted user message.

    Replies are scheduled ``latency`` seconds after the user message. Once
    the relay is closed, pending replies are cancelled and late results from
    the runner are dropped.
    """

    def __init__(
        self,
        responder: Responder,
        scheduler: Scheduler,
        latency: float = DEFAULT_LATENCY_S,
        runner: ReplyRunner = run_inline,
        greeting: str | None = GREETING,
    ) -> None:
        self._responder = responder
        self._scheduler = scheduler
        self._latency = latency
        self._runner = runner
        self._messages: list[ChatMessage] = []
        self._pending: dict[str, Handle | None] = {}
        self._closed = False
        self.on_message: Callable[[ChatMessage], None] | None = None
        if greeting:
            self._messages.append(_message(greeting, is_user=False))

    @property
    def transcript(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def latency(self) -> float:
        return self._latency

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, text: str) -> bool:
        """Append the user message and schedule the reply.

        Returns:
            False when the text is empty or whitespace, or the relay is closed.
        """
        if self._closed or parse_chat_text(text) is None:
            return False
        self._append(_message(text, is_user=True))

        ticket = new_id()
        self._pending[ticket] = self._scheduler.call_later(
            self._latency, lambda: self._dispatch(ticket)
        )
        return True

    def close(self) -> None:
        self._closed = True
        for handle in self._pending.values():
            if handle is not None:
                handle.cancel()
        self._pending.clear()

    def _dispatch(self, ticket: str) -> None:
        if ticket not in self._pending:
            return
        self._pending[ticket] = None
        history = self.transcript
        self._runner(
            lambda: self._reply_for(history),
            lambda reply: self._complete(ticket, reply),
        )

    def _reply_for(self, history: tuple[ChatMessage, ...]) -> str:
        try:
            return self._responder.next_reply(history)
        except Exception as exc:
            logger.warning("Responder failed, using fallback reply: %s", exc)
            return FALLBACK_REPLY

    def _complete(self, ticket: str, reply: str) -> None:
        if self._closed or ticket not in self._pending:
            logger.debug("Dropping reply for closed conversation")
            return
        del self._pending[ticket]
        self._append(_message(reply, is_user=False))

    def _append(self, message: ChatMessage) -> None:
        self._messages.append(message)
        if self.on_message is not None:
            self.on_message(message)


def _message(text: str, is_user: bool) -> ChatMessage:
    return ChatMessage(
        id=new_id(),
        text=text,
        is_user=is_user,
        timestamp=datetime.now(tz=tz.tzlocal()),
    )
