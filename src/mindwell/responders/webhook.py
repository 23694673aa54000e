"""Respuestas y planes de estudio generados por el servicio externo."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from dateutil import tz

from mindwell.forms import StudyForm
from mindwell.generation import (
    ConnectionStatus,
    GenerationClient,
    GenerationError,
    chat_payload,
    study_plan_payload,
)
from mindwell.model import ChatMessage, StudyPlan, new_id
from mindwell.responders.base import FALLBACK_REPLY, Responder

logger = logging.getLogger(__name__)

CHAT_FALLBACK = FALLBACK_REPLY
EMPTY_PLAN = "I couldn't generate a study plan right now. Please try again."
PLAN_FALLBACK = (
    "Sorry, there was an issue connecting to the AI service. Please check your "
    "connection and try again."
)


class WebhookResponder(Responder):
    """Forward the newest user message to the generation service."""

    def __init__(self, client: GenerationClient) -> None:
        self._client = client

    def next_reply(self, history: Sequence[ChatMessage]) -> str:
        text = next((m.text for m in reversed(history) if m.is_user), "")
        try:
            reply = self._client.generate(chat_payload(text))
        except GenerationError as exc:
            logger.warning("Chat request failed: %s", exc)
            self._client.status = ConnectionStatus.ERROR
            return CHAT_FALLBACK
        self._client.status = ConnectionStatus.CONNECTED
        return reply or CHAT_FALLBACK


class StudyPlanner:
    """Generate study plans and keep the successful ones, newest first."""

    def __init__(self, client: GenerationClient) -> None:
        self._client = client
        self._plans: list[StudyPlan] = []
        self.current_plan = ""

    @property
    def plans(self) -> tuple[StudyPlan, ...]:
        return tuple(self._plans)

    @property
    def status(self) -> ConnectionStatus:
        return self._client.status

    def probe(self) -> ConnectionStatus:
        return self._client.probe()

    def generate(self, form: StudyForm) -> StudyPlan | None:
        """Request a plan for a validated form.

        Returns:
            The stored plan, or None when the service failed; in that case
            ``current_plan`` holds the fallback message.
        """
        payload = study_plan_payload(
            form.subject, form.duration, form.difficulty, form.goals
        )
        try:
            text = self._client.generate(payload)
        except GenerationError as exc:
            logger.warning("Study plan request failed: %s", exc)
            self._client.status = ConnectionStatus.ERROR
            self.current_plan = PLAN_FALLBACK
            return None

        plan = StudyPlan(
            id=new_id(),
            subject=form.subject,
            duration=form.duration,
            difficulty=form.difficulty,
            goals=form.goals,
            plan=text or EMPTY_PLAN,
            timestamp=datetime.now(tz=tz.tzlocal()),
        )
        self._plans.insert(0, plan)
        self.current_plan = plan.plan
        return plan
