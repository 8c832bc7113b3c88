# tablero_auditorias/parsers/detection.py

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from tablero_auditorias.parsers.errors import HeaderNotFoundError
from tablero_auditorias.parsers.grid import CellKind, CellValue, Grid

# Tokens que identifican la fila de encabezado de la tabla de ítems
HEADER_MARKERS = ("CUMPLE", "ITEMS")

MIN_CATEGORIA_LEN = 10

_DIGITS = re.compile(r"^\d+$")


def find_header_row(grid: Grid, markers: Iterable[str] = HEADER_MARKERS) -> int:
    """
    Primera fila (de arriba hacia abajo) con una celda cuyo texto en mayúsculas
    contenga algún marcador. Si no hay ninguna -> HeaderNotFoundError.
    """
    markers = [m.upper() for m in markers]
    for r, row in enumerate(grid):
        for cell in row:
            text = cell.as_text().upper()
            if text and any(m in text for m in markers):
                return r

    raise HeaderNotFoundError(
        "No se encontró la estructura de la tabla de auditoría "
        f"(ninguna fila contiene {', '.join(markers)})."
    )


def _is_numeral(cell: CellValue) -> bool:
    if cell.kind is CellKind.NUMBER:
        v = cell.value
        if v == 0:
            return False
        return isinstance(v, int) or (isinstance(v, float) and v.is_integer())
    if cell.kind is CellKind.TEXT:
        return bool(_DIGITS.match(str(cell.value).strip()))
    return False


def categoria_of_row(row: List[CellValue]) -> Optional[str]:
    """
    Fila de categoría: número en la 1ra celda y en la 2da un texto largo (>10)
    que va en mayúsculas o no es pregunta, sin '?' ni marca 'x'.
    Retorna el nombre de la categoría o None si la fila no lo es.
    """
    if len(row) < 2 or not _is_numeral(row[0]):
        return None

    second = row[1]
    if second.kind is not CellKind.TEXT:
        return None

    text = str(second.value).strip()
    if len(text) <= MIN_CATEGORIA_LEN:
        return None
    if not (text.upper() == text or "¿" not in text):
        return None
    if "?" in text or "x" in text.lower():
        return None

    return text


class CategoryTracker:
    """
    Recorre filas en orden y mantiene la categoría vigente.
    feed() retorna True cuando la fila era una categoría (no es ítem).
    """

    def __init__(self):
        self.current: str = ""

    def feed(self, row: List[CellValue]) -> bool:
        cat = categoria_of_row(row)
        if cat is None:
            return False
        self.current = cat
        return True

    def categoria(self, default: str) -> str:
        return self.current or default
