"""Tests for the GUI-independent helpers in app.py."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import time

import pytest

from mindwell import app
from mindwell.entries import EntryStore
from mindwell.model import Mood


def test_session_summary_empty() -> None:
    text = app.session_summary(EntryStore())
    assert "Sin registrar" in text
    assert "(0.0h)" in text
    assert "Racha: 0 días" in text


def test_session_summary_with_entries(monkeypatch: pytest.MonkeyPatch) -> None:
    day = app.local_today()
    monkeypatch.setattr(app, "local_today", lambda: day)
    store = EntryStore(today=lambda: day)
    store.record_mood(Mood.GREAT)
    store.record_sleep(time(23, 0), time(7, 0), 4)

    text = app.session_summary(store)
    assert "Ánimo de hoy: Great" in text
    assert "****." in text
    assert "(8.0h)" in text
    assert "Racha: 1 días" in text


def test_threaded_runner_posts_result_back() -> None:
    posted: list[Callable[[], None]] = []
    ready = threading.Event()

    def post(fn: Callable[[], None]) -> None:
        posted.append(fn)
        ready.set()

    results: list[str] = []
    run = app.threaded_runner(post)
    run(lambda: "reply", results.append)

    assert ready.wait(timeout=5)
    assert results == []
    posted[0]()
    assert results == ["reply"]


def test_entrypoint_reports_missing_kivy(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    from mindwell import __main__ as entry

    def no_kivy() -> int:
        raise ImportError("No module named 'kivy'")

    monkeypatch.setattr(entry, "run_app", no_kivy)
    monkeypatch.setattr(entry, "configure_logging", lambda: None)
    assert entry.main() == 1
    assert "pip install kivy" in capsys.readouterr().out
