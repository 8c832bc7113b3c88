# tests/test_export.py

import pandas as pd

from tablero_auditorias.exporters.excel_export import (
    ITEM_COLUMNS,
    export_calendar_to_excel,
    export_items_to_excel,
)
from tablero_auditorias.parsers.checklist import ChecklistParser
from tablero_auditorias.services.stats import build_annual_calendar


def test_export_items(tmp_path, make_xlsx, checklist_rows, checklist_config):
    audit = ChecklistParser(checklist_config).parse(make_xlsx(checklist_rows), "norte.xlsx")
    out = tmp_path / "out" / "items.xlsx"

    export_items_to_excel(audit.items, str(out))

    df = pd.read_excel(out, sheet_name="Auditorías", dtype=str).fillna("")
    assert list(df.columns) == ITEM_COLUMNS
    assert len(df) == 4
    assert df.loc[0, "Fecha"] == "13/01/2024"
    assert df.loc[0, "Estado"] == "Cumple"
    assert df.loc[2, "Categoría"] == "ORDEN Y LIMPIEZA"
    assert df.loc[2, "Observación"] == "Cajas en pasillo"


def test_export_items_empty(tmp_path):
    out = tmp_path / "vacio.xlsx"
    export_items_to_excel([], str(out))

    df = pd.read_excel(out, sheet_name="Auditorías")
    assert list(df.columns) == ITEM_COLUMNS
    assert df.empty


def test_export_calendar(tmp_path, make_xlsx, checklist_rows, checklist_config):
    audit = ChecklistParser(checklist_config).parse(make_xlsx(checklist_rows), "norte.xlsx")
    cal = build_annual_calendar([audit])
    out = tmp_path / "cal.xlsx"

    export_calendar_to_excel(cal, str(out))

    df = pd.read_excel(out, sheet_name="Calendario Anual")
    assert list(df.columns)[:2] == ["Operación", "Ene 2024"]
    assert len(df.columns) == 13
    assert df.loc[0, "Operación"] == "Puerto Central"
    assert df.loc[0, "Ene 2024"] == 50.0
