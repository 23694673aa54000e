"""CLI: duración de sueño, prueba de conexión, planes de estudio y chat."""

from __future__ import annotations

import argparse
from pathlib import Path

from mindwell.forms import (
    DIFFICULTY_OPTIONS,
    DURATION_OPTIONS,
    parse_sleep_form,
    parse_study_form,
)
from mindwell.generation import ConnectionStatus, GenerationClient
from mindwell.logging_config import configure_logging
from mindwell.relay import ConversationRelay
from mindwell.responders.base import Responder
from mindwell.responders.canned import CannedResponder
from mindwell.responders.webhook import StudyPlanner, WebhookResponder
from mindwell.scheduler import ManualScheduler
from mindwell.sleep import sleep_duration
from mindwell.storage import SQLiteStore, resolve_webhook_url


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="MindWell: sueño, meditación y planes de estudio."
    )
    parser.add_argument(
        "--db",
        default=str(Path.cwd() / "mindwell.sqlite3"),
        help="Base SQLite de configuración (default: ./mindwell.sqlite3).",
    )
    parser.add_argument("--verbose", action="store_true", help="Logging DEBUG.")
    sub = parser.add_subparsers(dest="command", required=True)

    sleep = sub.add_parser("sleep", help="Calcula horas dormidas.")
    sleep.add_argument("bedtime", help="Hora de acostarse, ej. 23:00.")
    sleep.add_argument("wake_time", help="Hora de despertar, ej. 7:00am.")

    sub.add_parser("probe", help="Prueba la conexión con el servicio.")

    plan = sub.add_parser("plan", help="Genera un plan de estudio.")
    plan.add_argument("subject")
    plan.add_argument("--duration", choices=DURATION_OPTIONS, default="1 month")
    plan.add_argument(
        "--difficulty", choices=DIFFICULTY_OPTIONS, default="beginner"
    )
    plan.add_argument("--goals", default="")

    chat = sub.add_parser("chat", help="Envía un mensaje al chat.")
    chat.add_argument("message")
    chat.add_argument(
        "--offline",
        action="store_true",
        help="Usa respuestas simuladas en lugar del servicio.",
    )
    return parser.parse_args(argv)


def _client(db: str) -> GenerationClient:
    config = SQLiteStore(Path(db).expanduser()).load_config()
    return GenerationClient(resolve_webhook_url(config), timeout_s=config.timeout_s)


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Exit code (0 on success, 1 when the service is unreachable, 2 on
        invalid input).
    """
    ns = parse_args(argv)
    configure_logging("DEBUG" if ns.verbose else "INFO")

    if ns.command == "sleep":
        form = parse_sleep_form(ns.bedtime, ns.wake_time, 5)
        if form is None:
            print(f"Horas inválidas: {ns.bedtime!r} / {ns.wake_time!r}")
            return 2
        print(f"{sleep_duration(form.bedtime, form.wake_time)}h")
        return 0

    if ns.command == "probe":
        with _client(ns.db) as client:
            status = client.probe()
        print(f"Estado: {status.value}")
        return 0 if status is ConnectionStatus.CONNECTED else 1

    if ns.command == "plan":
        study = parse_study_form(ns.subject, ns.duration, ns.difficulty, ns.goals)
        if study is None:
            print("Falta la materia.")
            return 2
        with _client(ns.db) as client:
            planner = StudyPlanner(client)
            plan = planner.generate(study)
            print(planner.current_plan)
        return 0 if plan is not None else 1

    with _client(ns.db) as client:
        responder: Responder = (
            CannedResponder() if ns.offline else WebhookResponder(client)
        )
        scheduler = ManualScheduler()
        relay = ConversationRelay(responder, scheduler, greeting=None)
        if not relay.send(ns.message):
            print("Mensaje vacío.")
            return 2
        scheduler.advance(relay.latency)
        print(relay.transcript[-1].text)
    return 0 if ns.offline or client.status is not ConnectionStatus.ERROR else 1
