"""Exportación del historial de la sesión a Excel formateado."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, Side

from mindwell.entries import EntryStore
from mindwell.stats import daily_summary, mood_frame, sleep_frame

_DIA_SEMANA: tuple[str, ...] = ("lun", "mar", "mie", "jue", "vie", "sab", "dom")

_HEADER_MAP: dict[str, str] = {
    "weekday": "Día",
    "date": "Fecha",
    "mood": "Ánimo",
    "mood_score": "Puntaje",
    "notes": "Notas",
    "bedtime": "Acostarse",
    "wake_time": "Despertar",
    "quality": "Calidad",
    "duration": "Horas",
    "mood_count": "Registros\nánimo",
    "mood_avg": "Ánimo\npromedio",
    "sleep_hours": "Horas\nsueño",
    "sleep_quality": "Calidad\nsueño",
}

_WIDTHS: dict[str, int] = {
    "Día": 6,
    "Fecha": 12,
    "Ánimo": 10,
    "Puntaje": 9,
    "Notas": 40,
    "Acostarse": 11,
    "Despertar": 11,
    "Calidad": 9,
    "Horas": 8,
    "Registros\nánimo": 10,
    "Ánimo\npromedio": 10,
    "Horas\nsueño": 10,
    "Calidad\nsueño": 10,
}

_NUMBER_FORMATS: dict[str, str] = {
    "Fecha": "dd/mm/yyyy",
    "Horas": "0.0",
    "Ánimo\npromedio": "0.00",
    "Horas\nsueño": "0.0",
    "Calidad\nsueño": "0.00",
}


@dataclass(frozen=True)
class ExcelLayout:
    """Sheet names for the history workbook."""

    mood_sheet: str = "Ánimo"
    sleep_sheet: str = "Sueño"
    summary_sheet: str = "Resumen diario"


def _weekday_label(i: object) -> str:
    """Convierte índice 0-6 (lunes-domingo) a etiqueta de 3 letras."""
    try:
        if i is None or (isinstance(i, float) and pd.isna(i)):
            return ""
        if isinstance(i, int | float):
            idx = int(i)
            return _DIA_SEMANA[idx] if 0 <= idx < 7 else ""
        return ""
    except (ValueError, TypeError):
        return ""


def _prepare(df: pd.DataFrame) -> pd.DataFrame:
    """Añade columna Día, convierte fechas y renombra cabeceras."""
    export_df = df.copy()
    if "date" in export_df.columns and not export_df.empty:
        dates = pd.to_datetime(export_df["date"], errors="coerce")
        export_df["date"] = dates
        export_df.insert(0, "weekday", dates.dt.weekday.map(_weekday_label))
    return export_df.rename(columns=_HEADER_MAP)


def write_history_xlsx(
    store: EntryStore, out_path: Path, layout: ExcelLayout | None = None
) -> None:
    """Write mood, sleep and daily summary sheets for the session.

    Args:
        store: Session history to export.
        out_path: Output path for the XLSX file.
        layout: Sheet naming; defaults to ``ExcelLayout()``.
    """
    layout = layout or ExcelLayout()
    out_path.parent.mkdir(parents=True, exist_ok=True)

    sheets = [
        (layout.mood_sheet, mood_frame(store)),
        (layout.sleep_sheet, sleep_frame(store)),
        (layout.summary_sheet, daily_summary(store)),
    ]
    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        for name, frame in sheets:
            _prepare(frame).to_excel(writer, index=False, sheet_name=name)
            _format_sheet(writer.book[name])


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.alignment = center
        cell.border = border

    headers = [str(cell.value) for cell in ws[1]]
    col_index = {name: idx + 1 for idx, name in enumerate(headers)}
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border
        for header, fmt in _NUMBER_FORMATS.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt

    for header, width in _WIDTHS.items():
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width
