# tests/conftest.py

from io import BytesIO

import pytest
from openpyxl import Workbook

from tablero_auditorias import create_app
from tablero_auditorias.config import TestConfig
from tablero_auditorias.parsers.column_config import CellRef, ColumnConfig


def _xlsx_bytes(rows) -> bytes:
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(list(row))
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def make_xlsx():
    return _xlsx_bytes


@pytest.fixture
def checklist_rows():
    # Planilla típica: metadatos arriba, encabezado en fila 3 (base 0), dos categorías
    return [
        ["Operación: Puerto Central", None, None, None, None, "Fecha: 13/01/2024"],
        ["Responsable de la Operación: Luis Mora", None, None, None, None, "Auditor: Ana Rojas"],
        ["Cliente: Naviera Sur"],
        ["N°", "ITEMS", "CUMPLE", "CUMPLE PARCIAL", "NO CUMPLE", "NO APLICA", "OBSERVACIONES"],
        [1, "SEGURIDAD INDUSTRIAL"],
        ["1.1", "¿Se usa el equipo de protección?", "x", None, None, None, "Completo"],
        ["1.2", "¿Extintores con carga vigente?", None, "x", None, None, None],
        [2, "ORDEN Y LIMPIEZA"],
        ["2.1", "¿Pasillos libres de obstáculos?", None, None, "x", None, "Cajas en pasillo"],
        ["2.2", "¿Bodega de químicos rotulada?", None, None, None, "sí"],
        ["2.3", "¿Basureros con tapa?", None, None, None, None],
        ["2.4", "Ok", "x"],
    ]


@pytest.fixture
def checklist_config():
    return ColumnConfig(
        pregunta=1,
        cumple=2,
        cumple_parcial=3,
        no_cumple=4,
        no_aplica=5,
        header_row_index=3,
        observacion=6,
        operacion_cell=CellRef(0, 0),
        fecha_cell=CellRef(0, 5),
        responsable_cell=CellRef(1, 0),
        auditor_cell=CellRef(1, 5),
        cliente_cell=CellRef(2, 0),
    )


@pytest.fixture
def app(tmp_path):
    class _TestConfig(TestConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")
        OUTPUT_FOLDER = str(tmp_path / "outputs")

    app = create_app(_TestConfig)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()
