"""Persistencia SQLite de la configuración (los registros no se guardan)."""

from __future__ import annotations

import os
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from mindwell.generation import DEFAULT_TIMEOUT_S
from mindwell.timer import DEFAULT_DURATION, PRESETS

WEBHOOK_ENV = "MINDWELL_WEBHOOK_URL"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS app_config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


@dataclass(frozen=True)
class AppConfig:
    """Configuracion persistida de la app."""

    webhook_url: str = ""
    timeout_s: float = DEFAULT_TIMEOUT_S
    default_duration: int = DEFAULT_DURATION
    export_dir: str = ""


class SQLiteStore:
    """Repositorio SQLite para la configuración."""

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists."""
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def load_config(self) -> AppConfig:
        """Devuelve configuracion guardada o defaults."""
        with self._connect() as conn:
            rows = conn.execute("SELECT key, value FROM app_config").fetchall()
        values = {row["key"]: row["value"] for row in rows}
        defaults = AppConfig()
        return AppConfig(
            webhook_url=values.get("webhook_url", defaults.webhook_url),
            timeout_s=_parse_timeout(values.get("timeout_s"), defaults.timeout_s),
            default_duration=_parse_duration(
                values.get("default_duration"), defaults.default_duration
            ),
            export_dir=values.get("export_dir", defaults.export_dir),
        )

    def save_config(self, config: AppConfig) -> None:
        """Guarda la configuracion en tabla key/value."""
        payload = {
            "webhook_url": config.webhook_url,
            "timeout_s": str(config.timeout_s),
            "default_duration": str(config.default_duration),
            "export_dir": config.export_dir,
        }
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO app_config(key, value) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                payload.items(),
            )
            conn.commit()


def resolve_webhook_url(config: AppConfig) -> str:
    """Environment override first, then the stored URL."""
    env = os.environ.get(WEBHOOK_ENV, "").strip()
    return env or config.webhook_url


def _parse_timeout(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _parse_duration(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value in PRESETS else default
