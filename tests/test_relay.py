from __future__ import annotations

import random
from collections.abc import Callable, Sequence

from mindwell.model import ChatMessage
from mindwell.relay import ConversationRelay
from mindwell.responders.base import FALLBACK_REPLY, GREETING, Responder
from mindwell.responders.canned import CANNED_REPLIES, CannedResponder
from mindwell.scheduler import ManualScheduler


class _EchoResponder(Responder):
    def __init__(self) -> None:
        self.seen: list[tuple[str, ...]] = []

    def next_reply(self, history: Sequence[ChatMessage]) -> str:
        self.seen.append(tuple(m.text for m in history))
        return f"echo: {history[-1].text}"


def _relay(**kwargs: object) -> tuple[ConversationRelay, ManualScheduler, _EchoResponder]:
    scheduler = ManualScheduler()
    responder = _EchoResponder()
    relay = ConversationRelay(responder, scheduler, **kwargs)  # type: ignore[arg-type]
    return relay, scheduler, responder


def test_transcript_starts_with_greeting() -> None:
    relay, _, _ = _relay()
    assert len(relay.transcript) == 1
    assert relay.transcript[0].text == GREETING
    assert relay.transcript[0].is_user is False


def test_blank_messages_are_ignored() -> None:
    relay, scheduler, _ = _relay()
    assert relay.send("") is False
    assert relay.send("   ") is False
    scheduler.advance(5)
    assert len(relay.transcript) == 1
    assert relay.pending == 0


def test_send_appends_user_message_then_one_reply() -> None:
    relay, scheduler, responder = _relay()
    assert relay.send("hello") is True

    assert [m.text for m in relay.transcript] == [GREETING, "hello"]
    assert relay.transcript[-1].is_user is True
    assert relay.pending == 1

    scheduler.advance(0.5)
    assert len(relay.transcript) == 2

    scheduler.advance(0.5)
    assert [m.text for m in relay.transcript] == [GREETING, "hello", "echo: hello"]
    assert relay.transcript[-1].is_user is False
    assert responder.seen == [(GREETING, "hello")]

    scheduler.advance(10)
    assert len(relay.transcript) == 3
    assert relay.pending == 0


def test_each_message_gets_its_own_reply() -> None:
    relay, scheduler, _ = _relay(greeting=None)
    relay.send("a")
    scheduler.advance(0.5)
    relay.send("b")
    scheduler.advance(2)
    assert [m.text for m in relay.transcript] == ["a", "b", "echo: a", "echo: b"]


def test_close_cancels_pending_reply() -> None:
    relay, scheduler, responder = _relay()
    relay.send("hello")
    relay.close()
    scheduler.advance(5)
    assert len(relay.transcript) == 2
    assert responder.seen == []
    assert relay.send("again") is False


def test_late_runner_result_is_dropped_after_close() -> None:
    parked: list[Callable[[], None]] = []

    def deferred(compute: Callable[[], str], done: Callable[[str], None]) -> None:
        reply = compute()
        parked.append(lambda: done(reply))

    relay, scheduler, _ = _relay(runner=deferred)
    relay.send("hello")
    scheduler.advance(1)
    assert len(parked) == 1

    relay.close()
    parked[0]()
    assert [m.text for m in relay.transcript] == [GREETING, "hello"]


def test_on_message_listener_sees_appends() -> None:
    relay, scheduler, _ = _relay()
    seen: list[str] = []
    relay.on_message = lambda m: seen.append(m.text)
    relay.send("hi")
    scheduler.advance(1)
    assert seen == ["hi", "echo: hi"]


def test_canned_responder_picks_from_pool() -> None:
    responder = CannedResponder(rng=random.Random(7))
    replies = {responder.next_reply([]) for _ in range(200)}
    assert replies <= set(CANNED_REPLIES)
    assert len(replies) == len(CANNED_REPLIES)


def test_canned_responder_is_deterministic_with_seed() -> None:
    a = CannedResponder(rng=random.Random(1))
    b = CannedResponder(rng=random.Random(1))
    assert [a.next_reply([]) for _ in range(5)] == [b.next_reply([]) for _ in range(5)]


def test_relay_with_canned_responder() -> None:
    scheduler = ManualScheduler()
    relay = ConversationRelay(CannedResponder(["only"]), scheduler)
    relay.send("hello")
    scheduler.advance(1)
    assert relay.transcript[-1].text == "only"


class _BrokenResponder(Responder):
    def next_reply(self, history: Sequence[ChatMessage]) -> str:
        raise RuntimeError("backend exploded")


def test_failing_responder_completes_with_fallback() -> None:
    scheduler = ManualScheduler()
    relay = ConversationRelay(_BrokenResponder(), scheduler)
    assert relay.send("hello") is True
    scheduler.advance(1)

    assert relay.pending == 0
    assert len(relay.transcript) == 3
    assert relay.transcript[-1].text == FALLBACK_REPLY
    assert relay.transcript[-1].is_user is False
