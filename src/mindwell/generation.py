"""Cliente HTTP del servicio externo de generación de texto (webhook)."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any

import httpx
from dateutil import tz

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 30.0

PROBE_PAYLOAD: dict[str, str] = {
    "message": "Study planner connection test",
    "type": "study_test",
}


class ConnectionStatus(str, Enum):
    UNKNOWN = "unknown"
    CONNECTED = "connected"
    ERROR = "error"


class GenerationError(Exception):
    """The generation service was unreachable or answered with an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def client_timestamp() -> str:
    return datetime.now(tz=tz.tzlocal()).isoformat(timespec="seconds")


def chat_payload(text: str) -> dict[str, Any]:
    return {"message": text, "type": "chat", "timestamp": client_timestamp()}


def study_plan_payload(
    subject: str, duration: str, difficulty: str, goals: str
) -> dict[str, Any]:
    """Build the study plan request with its prompt and metadata fields."""
    message = (
        f"Create a detailed study plan for: {subject}. Duration: {duration}, "
        f"Difficulty: {difficulty}. Goals: {goals or 'General learning'}"
    )
    return {
        "message": message,
        "type": "study_plan",
        "subject": subject,
        "duration": duration,
        "difficulty": difficulty,
        "goals": goals,
        "timestamp": client_timestamp(),
    }


class GenerationClient:
    """JSON POST client for the generation webhook.

    Response bodies are free text and are returned verbatim.
    """

    def __init__(
        self,
        url: str,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = url
        self._client = httpx.Client(timeout=timeout_s, transport=transport)
        self._closed = False
        self.status = ConnectionStatus.UNKNOWN

    @property
    def url(self) -> str:
        return self._url

    def generate(self, payload: dict[str, Any]) -> str:
        """POST ``payload`` and return the response text.

        Raises:
            GenerationError: On transport failure or a non-success status.
        """
        if not self._url:
            raise GenerationError("No generation service URL configured")
        if self._closed:
            raise GenerationError("Generation client is closed")
        try:
            response = self._client.post(self._url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise GenerationError(f"Request failed: {exc}") from exc
        except RuntimeError as exc:
            # httpx refuses requests on a client closed from another thread.
            if self._closed:
                raise GenerationError("Generation client is closed") from exc
            raise
        if not response.is_success:
            raise GenerationError(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )
        return response.text

    def probe(self) -> ConnectionStatus:
        """Classify the channel as reachable or not. Never raises."""
        try:
            self.generate(dict(PROBE_PAYLOAD))
        except GenerationError as exc:
            logger.warning("Generation service probe failed: %s", exc)
            self.status = ConnectionStatus.ERROR
        else:
            logger.info("Generation service reachable at %s", self._url)
            self.status = ConnectionStatus.CONNECTED
        return self.status

    def close(self) -> None:
        self._closed = True
        self._client.close()

    def __enter__(self) -> GenerationClient:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()
