# tablero_auditorias/exporters/excel_export.py

import os
from typing import Any, Dict, Iterable

import pandas as pd
from openpyxl.utils import get_column_letter

from tablero_auditorias.parsers.records import AuditItem
from tablero_auditorias.utils.dates import format_date

ITEM_COLUMNS = [
    "Operación",
    "Responsable",
    "Cliente",
    "Fecha",
    "Auditor",
    "Categoría",
    "Item",
    "Pregunta",
    "Estado",
    "Observación",
    "Oportunidad de Mejora",
    "Normativa",
]

MESES_CORTOS = ["Ene", "Feb", "Mar", "Abr", "May", "Jun", "Jul", "Ago", "Sep", "Oct", "Nov", "Dic"]


def _ensure_parent(out_path: str) -> None:
    parent = os.path.dirname(out_path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def items_to_dataframe(items: Iterable[AuditItem]) -> pd.DataFrame:
    df = pd.DataFrame([{
        "Operación": it.operacion,
        "Responsable": it.responsable,
        "Cliente": it.cliente,
        "Fecha": format_date(it.fecha),
        "Auditor": it.auditor,
        "Categoría": it.categoria,
        "Item": it.item,
        "Pregunta": it.pregunta,
        "Estado": it.estado.value,
        "Observación": it.observacion,
        "Oportunidad de Mejora": it.oportunidad_mejora,
        "Normativa": it.normativa,
    } for it in items], columns=ITEM_COLUMNS)
    return df


def export_items_to_excel(items: Iterable[AuditItem], out_path: str) -> str:
    """
    Una fila por ítem, columnas en orden fijo, hoja "Auditorías".
    """
    _ensure_parent(out_path)
    df = items_to_dataframe(items)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Auditorías", index=False)

        ws = writer.sheets["Auditorías"]
        widths = [30, 20, 20, 12, 20, 25, 8, 50, 15, 50, 50, 20]
        for i, w in enumerate(widths, start=1):
            ws.column_dimensions[get_column_letter(i)].width = w

    return out_path


def export_calendar_to_excel(calendar: Dict[str, Any], out_path: str) -> str:
    """
    Calendario anual: una fila por operación, una columna por mes (cumplimiento %).
    """
    _ensure_parent(out_path)
    year = calendar["year"]

    df = pd.DataFrame([{
        "Operación": row["operacion"],
        **{f"{MESES_CORTOS[m]} {year}": v for m, v in enumerate(row["meses"])},
    } for row in calendar["rows"]], columns=["Operación"] + [f"{m} {year}" for m in MESES_CORTOS])

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Calendario Anual", index=False)

    return out_path
