# tablero_auditorias/parsers/grid.py

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from io import BytesIO
from typing import Any, List, Optional

from openpyxl import load_workbook

from tablero_auditorias.parsers.errors import DateParseError, WorkbookError
from tablero_auditorias.utils.dates import parse_date_text, serial_to_date, year_in_range
from tablero_auditorias.utils.logging import get_logger

logger = get_logger("grid")

_NUMBER_PREFIX = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


class CellKind(Enum):
    NUMBER = "number"
    TEXT = "text"
    DATE = "date"
    EMPTY = "empty"


@dataclass(frozen=True)
class CellValue:
    kind: CellKind
    value: Any = None

    @classmethod
    def from_raw(cls, raw: Any) -> "CellValue":
        """
        Convierte un valor crudo de openpyxl al variant.
        bool -> texto (openpyxl lo entrega como True/False), datetime -> fecha.
        """
        if raw is None:
            return EMPTY
        if isinstance(raw, bool):
            return cls(CellKind.TEXT, str(raw).upper())
        if isinstance(raw, (int, float)):
            return cls(CellKind.NUMBER, raw)
        if isinstance(raw, datetime):
            return cls(CellKind.DATE, raw.date())
        if isinstance(raw, date):
            return cls(CellKind.DATE, raw)

        s = str(raw)
        if s.strip() == "":
            return EMPTY
        return cls(CellKind.TEXT, s)

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.EMPTY

    def as_text(self) -> str:
        if self.kind is CellKind.EMPTY:
            return ""
        if self.kind is CellKind.NUMBER:
            v = self.value
            if isinstance(v, float) and v.is_integer():
                return str(int(v))
            return str(v)
        if self.kind is CellKind.DATE:
            return self.value.isoformat()
        return str(self.value).strip()


EMPTY = CellValue(CellKind.EMPTY)

Grid = List[List[CellValue]]


def build_grid(rows) -> Grid:
    """
    Construye un grid desde filas de valores crudos (listas/tuplas).
    """
    return [[CellValue.from_raw(v) for v in (row or [])] for row in rows]


def load_grid(data: bytes) -> Grid:
    """
    Lee la primera hoja del libro (solo valores, sin estilos ni fórmulas).
    """
    try:
        wb = load_workbook(BytesIO(data), read_only=True, data_only=True)
    except Exception as e:
        raise WorkbookError(f"No se pudo abrir el archivo (inválido o corrupto): {e}") from e

    try:
        if not wb.worksheets:
            raise WorkbookError("El archivo no contiene hojas.")

        ws = wb.worksheets[0]
        grid = []
        for row in ws.iter_rows(values_only=True):
            cells = [CellValue.from_raw(v) for v in row]
            # recortar celdas vacías al final (read_only rellena hasta max_column)
            while cells and cells[-1].is_empty:
                cells.pop()
            grid.append(cells)

        logger.debug(f"Grid cargado hoja={ws.title} filas={len(grid)}")
        return grid
    finally:
        wb.close()


def read_cell(grid: Grid, row: int, col: int) -> CellValue:
    if row < 0 or row >= len(grid):
        return EMPTY
    cells = grid[row]
    if col < 0 or col >= len(cells):
        return EMPTY
    return cells[col]


def read_string(grid: Grid, row: int, col: int) -> str:
    return read_cell(grid, row, col).as_text()


def parse_number(cell: CellValue) -> Optional[float]:
    """
    Número nativo tal cual; texto con coma decimal -> punto.
    Vacío / no numérico -> None (no 0).
    """
    if cell.kind is CellKind.NUMBER:
        return float(cell.value)
    if cell.kind is not CellKind.TEXT:
        return None

    s = str(cell.value).strip().replace(",", ".", 1)
    m = _NUMBER_PREFIX.match(s)
    if not m:
        return None
    return float(m.group(0))


def read_number(grid: Grid, row: int, col: int) -> Optional[float]:
    return parse_number(read_cell(grid, row, col))


def parse_date(cell: CellValue) -> date:
    """
    Fecha desde la celda:
      - fecha nativa (celda con formato fecha)
      - serial de Excel (0 < n < 100000)
      - DD/MM/YYYY, DD-MM-YYYY
      - "20 de agosto del 2025"
    Año fuera de (2000, 2100) o texto ilegible -> DateParseError.
    """
    parsed: Optional[date] = None

    if cell.kind is CellKind.DATE:
        parsed = cell.value
    elif cell.kind is CellKind.NUMBER:
        parsed = serial_to_date(cell.value)
    elif cell.kind is CellKind.TEXT:
        parsed = parse_date_text(cell.value)

    if parsed is None or not year_in_range(parsed):
        raise DateParseError(
            f"No se pudo leer la fecha ('{cell.as_text()}'). Verifique la celda configurada para 'Fecha'."
        )
    return parsed


def read_date(grid: Grid, row: int, col: int) -> date:
    return parse_date(read_cell(grid, row, col))
