"""App Kivy: panel, chat, ánimo, sueño, meditación y planes de estudio."""

from __future__ import annotations

import logging
import threading
import traceback
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from mindwell.entries import EntryStore, local_today
from mindwell.excel_writer import write_history_xlsx
from mindwell.forms import (
    DIFFICULTY_OPTIONS,
    DURATION_OPTIONS,
    parse_mood_form,
    parse_sleep_form,
    parse_study_form,
)
from mindwell.generation import ConnectionStatus, GenerationClient
from mindwell.model import ChatMessage, Mood
from mindwell.relay import ConversationRelay
from mindwell.responders.base import Responder
from mindwell.responders.canned import CannedResponder
from mindwell.responders.webhook import StudyPlanner, WebhookResponder
from mindwell.stats import latest_mood, latest_sleep, streak
from mindwell.storage import SQLiteStore, resolve_webhook_url
from mindwell.timer import PRESETS, MeditationTimer, Phase, TimerState, format_clock

logger = logging.getLogger(__name__)

STATUS_LABELS: dict[ConnectionStatus, str] = {
    ConnectionStatus.UNKNOWN: "Probando...",
    ConnectionStatus.CONNECTED: "Conectado",
    ConnectionStatus.ERROR: "Sin conexión",
}

RESOURCES_TEXT = (
    "Apoyo en crisis\n"
    "  988 Suicide & Crisis Lifeline: llamar o escribir al 988\n"
    "  Crisis Text Line: enviar HOME al 741741\n\n"
    "Ayuda profesional\n"
    "  Buscar terapeuta: directorio de Psychology Today\n"
    "  Terapia online: BetterHelp, Talkspace, Cerebral\n"
)


def session_summary(store: EntryStore) -> str:
    """Dashboard text: latest mood, latest sleep and streak."""
    mood = latest_mood(store)
    sleep = latest_sleep(store)
    days = streak(store, local_today())
    stars = "*" * sleep.quality + "." * (5 - sleep.quality)
    return (
        f"Ánimo de hoy: {mood.value.capitalize() if mood else 'Sin registrar'}\n"
        f"Calidad de sueño: {stars}  ({sleep.duration}h)\n"
        f"Racha: {days} días\n"
        f"Registros: {len(store.mood_history)} ánimo, "
        f"{len(store.sleep_history)} sueño"
    )


def threaded_runner(
    post: Callable[[Callable[[], None]], None],
) -> Callable[[Callable[[], str], Callable[[str], None]], None]:
    """Compute replies off the UI thread and hand results back through ``post``."""

    def run(compute: Callable[[], str], done: Callable[[str], None]) -> None:
        def work() -> None:
            reply = compute()
            post(lambda: done(reply))

        threading.Thread(target=work, daemon=True).start()

    return run


def run_app() -> int:
    """Lanza la app Kivy."""
    from kivy.app import App
    from kivy.clock import Clock
    from kivy.core.window import Window
    from kivy.uix.boxlayout import BoxLayout
    from kivy.uix.button import Button
    from kivy.uix.label import Label
    from kivy.uix.spinner import Spinner
    from kivy.uix.tabbedpanel import TabbedPanel, TabbedPanelItem
    from kivy.uix.textinput import TextInput

    from mindwell.scheduler import KivyScheduler

    def post_to_ui(fn: Callable[[], None]) -> None:
        Clock.schedule_once(lambda _dt: fn(), 0)

    class MindWellApp(App):
        """Main Kivy app."""

        def __init__(self, **kwargs: object) -> None:
            super().__init__(**kwargs)
            self.store = SQLiteStore(Path.cwd() / "mindwell.sqlite3")
            self.app_config = self.store.load_config()
            self.entries = EntryStore()
            self.scheduler = KivyScheduler()
            self.client = GenerationClient(
                resolve_webhook_url(self.app_config),
                timeout_s=self.app_config.timeout_s,
            )
            responder: Responder = (
                WebhookResponder(self.client)
                if self.client.url
                else CannedResponder()
            )
            self.relay = ConversationRelay(
                responder,
                self.scheduler,
                runner=threaded_runner(post_to_ui),
            )
            self.planner = StudyPlanner(self.client)
            self.timer = MeditationTimer(
                self.scheduler,
                duration=self.app_config.default_duration,
                on_change=self._on_timer_change,
                on_complete=self._on_timer_complete,
            )
            self.status: Label | None = None
            self.dashboard: Label | None = None
            self.transcript: TextInput | None = None
            self.timer_label: Label | None = None
            self.plan_output: TextInput | None = None
            self.connection: Label | None = None
            self._timer_toggle: Button | None = None

        def build(self) -> BoxLayout:
            Window.bind(on_key_down=self._on_key_down)

            root = BoxLayout(orientation="vertical", spacing=8, padding=10)
            root.add_widget(Label(text="MindWell", size_hint_y=None, height=36))

            panel = TabbedPanel(do_default_tab=False)
            panel.add_widget(self._dashboard_tab())
            panel.add_widget(self._chat_tab())
            panel.add_widget(self._mood_tab())
            panel.add_widget(self._sleep_tab())
            panel.add_widget(self._meditation_tab())
            panel.add_widget(self._study_tab())
            panel.add_widget(self._resources_tab())
            root.add_widget(panel)

            self.status = Label(text="Listo", size_hint_y=None, height=30)
            root.add_widget(self.status)

            self.relay.on_message = lambda _msg: self._refresh_transcript()
            self._refresh_transcript()
            self._refresh_dashboard()
            self._probe_connection()
            return root

        def on_stop(self) -> None:
            self.timer.close()
            self.relay.close()
            self.client.close()

        def _on_key_down(
            self,
            _window: object,
            keycode: int,
            _scancode: int,
            _text: str,
            _modifiers: list[str],
        ) -> bool:
            # Esc: salir de fullscreen o cerrar app.
            if keycode != 27:
                return False
            if Window.fullscreen:
                Window.fullscreen = False
            else:
                self.stop()
            return True

        # --- pestañas ---

        def _dashboard_tab(self) -> TabbedPanelItem:
            tab = TabbedPanelItem(text="Panel")
            box = BoxLayout(orientation="vertical", spacing=8, padding=8)
            self.dashboard = Label(text="", halign="left", valign="top")
            box.add_widget(self.dashboard)
            export_btn = Button(text="Exportar Excel", size_hint_y=None, height=40)
            export_btn.bind(on_press=self._on_export)
            box.add_widget(export_btn)
            tab.add_widget(box)
            return tab

        def _chat_tab(self) -> TabbedPanelItem:
            tab = TabbedPanelItem(text="Chat")
            box = BoxLayout(orientation="vertical", spacing=8, padding=8)
            self.transcript = TextInput(readonly=True, multiline=True)
            box.add_widget(self.transcript)
            row = BoxLayout(orientation="horizontal", size_hint_y=None, height=40)
            message = TextInput(multiline=False)
            send_btn = Button(text="Enviar", size_hint_x=0.2)

            def send(*_args: object) -> None:
                if self.relay.send(message.text):
                    message.text = ""

            send_btn.bind(on_press=send)
            message.bind(on_text_validate=send)
            row.add_widget(message)
            row.add_widget(send_btn)
            box.add_widget(row)
            tab.add_widget(box)
            return tab

        def _mood_tab(self) -> TabbedPanelItem:
            tab = TabbedPanelItem(text="Ánimo")
            box = BoxLayout(orientation="vertical", spacing=8, padding=8)
            mood = Spinner(
                text="", values=[m.value for m in Mood], size_hint_y=None, height=40
            )
            notes = TextInput(hint_text="Notas (opcional)")
            save_btn = Button(text="Guardar ánimo", size_hint_y=None, height=40)

            def save(*_args: object) -> None:
                form = parse_mood_form(mood.text, notes.text)
                if form is None:
                    return
                self.entries.record_mood(form.mood, form.notes)
                mood.text = ""
                notes.text = ""
                self._refresh_dashboard()

            save_btn.bind(on_press=save)
            box.add_widget(mood)
            box.add_widget(notes)
            box.add_widget(save_btn)
            tab.add_widget(box)
            return tab

        def _sleep_tab(self) -> TabbedPanelItem:
            tab = TabbedPanelItem(text="Sueño")
            box = BoxLayout(orientation="vertical", spacing=8, padding=8)
            bedtime = TextInput(hint_text="Acostarse (23:00)", multiline=False)
            wake = TextInput(hint_text="Despertar (07:00)", multiline=False)
            quality = Spinner(
                text="", values=[str(i) for i in range(1, 6)], size_hint_y=None, height=40
            )
            save_btn = Button(text="Guardar sueño", size_hint_y=None, height=40)

            def save(*_args: object) -> None:
                form = parse_sleep_form(bedtime.text, wake.text, quality.text or None)
                if form is None:
                    return
                entry = self.entries.record_sleep(
                    form.bedtime, form.wake_time, form.quality
                )
                bedtime.text = ""
                wake.text = ""
                quality.text = ""
                self._set_status(f"Sueño registrado: {entry.duration}h")
                self._refresh_dashboard()

            save_btn.bind(on_press=save)
            for widget in (bedtime, wake, quality, save_btn):
                box.add_widget(widget)
            tab.add_widget(box)
            return tab

        def _meditation_tab(self) -> TabbedPanelItem:
            tab = TabbedPanelItem(text="Meditación")
            box = BoxLayout(orientation="vertical", spacing=8, padding=8)
            self.timer_label = Label(
                text=format_clock(self.timer.state.remaining), font_size="48sp"
            )
            box.add_widget(self.timer_label)

            presets = BoxLayout(orientation="horizontal", size_hint_y=None, height=40)
            for seconds in PRESETS:
                btn = Button(text=f"{seconds // 60} min")
                btn.bind(
                    on_press=lambda *_a, s=seconds: self.timer.select_duration(s)
                )
                presets.add_widget(btn)
            box.add_widget(presets)

            controls = BoxLayout(orientation="horizontal", size_hint_y=None, height=40)
            toggle_btn = Button(text="Iniciar")
            reset_btn = Button(text="Reiniciar")

            def toggle(*_args: object) -> None:
                if self.timer.state.running:
                    self.timer.pause()
                else:
                    self.timer.start()
                toggle_btn.text = "Pausar" if self.timer.state.running else "Iniciar"

            toggle_btn.bind(on_press=toggle)
            reset_btn.bind(on_press=lambda *_a: self.timer.reset())
            self._timer_toggle = toggle_btn
            controls.add_widget(toggle_btn)
            controls.add_widget(reset_btn)
            box.add_widget(controls)
            tab.add_widget(box)
            return tab

        def _study_tab(self) -> TabbedPanelItem:
            tab = TabbedPanelItem(text="Plan de estudio")
            box = BoxLayout(orientation="vertical", spacing=8, padding=8)
            self.connection = Label(
                text=STATUS_LABELS[self.planner.status], size_hint_y=None, height=30
            )
            box.add_widget(self.connection)
            subject = TextInput(hint_text="Materia", multiline=False)
            duration = Spinner(
                text="", values=list(DURATION_OPTIONS), size_hint_y=None, height=40
            )
            difficulty = Spinner(
                text="", values=list(DIFFICULTY_OPTIONS), size_hint_y=None, height=40
            )
            goals = TextInput(hint_text="Objetivos (opcional)")
            generate_btn = Button(text="Generar plan", size_hint_y=None, height=40)
            self.plan_output = TextInput(readonly=True, multiline=True)

            def generate(*_args: object) -> None:
                form = parse_study_form(
                    subject.text, duration.text, difficulty.text, goals.text
                )
                if form is None:
                    return
                generate_btn.disabled = True
                self._set_status("Generando plan...")

                def work() -> None:
                    plan = self.planner.generate(form)

                    def show() -> None:
                        generate_btn.disabled = False
                        if self.plan_output is not None:
                            self.plan_output.text = self.planner.current_plan
                        self._refresh_connection()
                        if plan is not None:
                            subject.text = ""
                            duration.text = ""
                            difficulty.text = ""
                            goals.text = ""
                            self._set_status(f"Plan generado: {plan.subject}")
                        else:
                            self._set_status("No se pudo generar el plan.")

                    post_to_ui(show)

                threading.Thread(target=work, daemon=True).start()

            generate_btn.bind(on_press=generate)
            for widget in (subject, duration, difficulty, goals, generate_btn):
                box.add_widget(widget)
            box.add_widget(self.plan_output)
            tab.add_widget(box)
            return tab

        def _resources_tab(self) -> TabbedPanelItem:
            tab = TabbedPanelItem(text="Recursos")
            tab.add_widget(Label(text=RESOURCES_TEXT, halign="left", valign="top"))
            return tab

        # --- acciones ---

        def _probe_connection(self) -> None:
            if not self.client.url:
                self._refresh_connection()
                return

            def work() -> None:
                self.planner.probe()
                post_to_ui(self._refresh_connection)

            threading.Thread(target=work, daemon=True).start()

        def _on_export(self, _: object) -> None:
            out_dir = (
                Path(self.app_config.export_dir).expanduser()
                if self.app_config.export_dir
                else Path.cwd() / "salidas"
            )
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            out_path = out_dir / f"mindwell_historial_{timestamp}.xlsx"
            try:
                write_history_xlsx(self.entries, out_path)
            except Exception as exc:
                self._show_error("exportar", exc)
                return
            self._set_status(f"Excel generado: {out_path}")

        def _on_timer_change(self, state: TimerState) -> None:
            if self.timer_label is not None:
                self.timer_label.text = format_clock(state.remaining)
            if self._timer_toggle is not None and state.phase is not Phase.RUNNING:
                self._timer_toggle.text = "Iniciar"

        def _on_timer_complete(self) -> None:
            self._set_status("Sesión de meditación completada.")

        # --- refresco de vistas ---

        def _refresh_dashboard(self) -> None:
            if self.dashboard is not None:
                self.dashboard.text = session_summary(self.entries)

        def _refresh_transcript(self) -> None:
            if self.transcript is None:
                return
            self.transcript.text = "\n\n".join(
                _format_message(m) for m in self.relay.transcript
            )

        def _refresh_connection(self) -> None:
            if self.connection is None:
                return
            if not self.client.url:
                self.connection.text = "Sin servicio configurado (chat simulado)"
                return
            self.connection.text = STATUS_LABELS[self.planner.status]

        def _set_status(self, text: str) -> None:
            if self.status is not None:
                self.status.text = text

        def _show_error(self, action: str, exc: Exception) -> None:
            error_type = type(exc).__name__
            logger.error("Error al %s: %s", action, exc)
            self._set_status(f"Error al {action} ({error_type}): {exc}")
            if self.plan_output is not None:
                self.plan_output.text = traceback.format_exc()

    MindWellApp().run()
    return 0


def _format_message(message: ChatMessage) -> str:
    who = "Tú" if message.is_user else "MindWell"
    return f"[{message.timestamp.strftime('%H:%M')}] {who}: {message.text}"
