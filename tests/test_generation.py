from __future__ import annotations

import json

import httpx
import pytest

from mindwell.generation import (
    PROBE_PAYLOAD,
    ConnectionStatus,
    GenerationClient,
    GenerationError,
    chat_payload,
    study_plan_payload,
)

URL = "https://example.test/webhook"


def _client(handler: object) -> GenerationClient:
    return GenerationClient(URL, transport=httpx.MockTransport(handler))  # type: ignore[arg-type]


def test_generate_posts_json_and_returns_text() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, text="plain reply")

    with _client(handler) as client:
        assert client.generate({"message": "hi"}) == "plain reply"

    assert captured["method"] == "POST"
    assert captured["url"] == URL
    assert captured["body"] == {"message": "hi"}


def test_generate_raises_on_error_status() -> None:
    client = _client(lambda _req: httpx.Response(502))
    with pytest.raises(GenerationError) as info:
        client.generate({})
    assert info.value.status_code == 502


def test_generate_raises_on_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(GenerationError):
        _client(handler).generate({})


def test_generate_without_url_raises() -> None:
    with pytest.raises(GenerationError):
        GenerationClient("").generate({})


def test_probe_classifies_channel() -> None:
    bodies: list[dict[str, object]] = []

    def ok(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200)

    client = _client(ok)
    assert client.status is ConnectionStatus.UNKNOWN
    assert client.probe() is ConnectionStatus.CONNECTED
    assert bodies == [PROBE_PAYLOAD]

    failing = _client(lambda _req: httpx.Response(404))
    assert failing.probe() is ConnectionStatus.ERROR
    assert failing.status is ConnectionStatus.ERROR


def test_chat_payload_shape() -> None:
    payload = chat_payload("hello")
    assert payload["message"] == "hello"
    assert payload["type"] == "chat"
    assert "T" in str(payload["timestamp"])


def test_study_plan_payload_prompt_and_metadata() -> None:
    payload = study_plan_payload("Biology", "2 weeks", "intermediate", "")
    assert payload["message"] == (
        "Create a detailed study plan for: Biology. Duration: 2 weeks, "
        "Difficulty: intermediate. Goals: General learning"
    )
    assert payload["type"] == "study_plan"
    assert payload["subject"] == "Biology"
    assert payload["duration"] == "2 weeks"
    assert payload["difficulty"] == "intermediate"
    assert payload["goals"] == ""
    assert "timestamp" in payload


def test_study_plan_payload_keeps_goals() -> None:
    payload = study_plan_payload("Go", "1 week", "beginner", "pass the exam")
    assert str(payload["message"]).endswith("Goals: pass the exam")


def test_generate_wraps_malformed_url() -> None:
    client = GenerationClient("http://[::1")
    with pytest.raises(GenerationError):
        client.generate({})
    assert client.probe() is ConnectionStatus.ERROR


def test_generate_after_close_raises_generation_error() -> None:
    client = _client(lambda _req: httpx.Response(200, text="late"))
    client.close()
    with pytest.raises(GenerationError):
        client.generate({})
    assert client.probe() is ConnectionStatus.ERROR
    assert client.status is ConnectionStatus.ERROR
