# tablero_auditorias/utils/dates.py

import re
from datetime import date, datetime, timedelta
from typing import Optional

from tablero_auditorias.utils.strings import lower_clean, strip_label

# Epoch de seriales de Excel (30/12/1899). La conversión usa (serial - 1) días.
EXCEL_EPOCH = date(1899, 12, 30)

SERIAL_MIN = 0
SERIAL_MAX = 100000

YEAR_MIN = 2000  # exclusivo
YEAR_MAX = 2100  # exclusivo

MESES = {
    "enero": 1,
    "febrero": 2,
    "marzo": 3,
    "abril": 4,
    "mayo": 5,
    "junio": 6,
    "julio": 7,
    "agosto": 8,
    "septiembre": 9,
    "setiembre": 9,
    "octubre": 10,
    "noviembre": 11,
    "diciembre": 12,
}

_DMY_RE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{2}|\d{4})(?:\s+.*)?$")
_LARGA_RE = re.compile(r"^(\d{1,2})\s+(?:de\s+)?([a-z]+)\s+(?:(?:de|del)\s+)?(\d{4})$")


def year_in_range(d: date) -> bool:
    return YEAR_MIN < d.year < YEAR_MAX


def serial_to_date(serial) -> Optional[date]:
    """
    Serial de Excel -> date. Solo acepta 0 < serial < 100000.
    """
    try:
        value = float(serial)
    except (TypeError, ValueError):
        return None

    if not (SERIAL_MIN < value < SERIAL_MAX):
        return None

    dt = datetime(EXCEL_EPOCH.year, EXCEL_EPOCH.month, EXCEL_EPOCH.day) + timedelta(days=value - 1)
    return dt.date()


def date_to_serial(d: date) -> int:
    """
    Inverso de serial_to_date para fechas posteriores al epoch.
    """
    if isinstance(d, datetime):
        d = d.date()
    return (d - EXCEL_EPOCH).days + 1


def _expand_year(y: int) -> int:
    if y < 100:
        return 2000 + y if y < 50 else 1900 + y
    return y


def parse_dmy(text: str) -> Optional[date]:
    """
    DD/MM/YYYY o DD-MM-YYYY (siempre día primero).
    Fechas imposibles (31/04) se rechazan, no se corren al mes siguiente.
    """
    m = _DMY_RE.match(str(text or "").strip())
    if not m:
        return None

    day, month, year = int(m.group(1)), int(m.group(2)), _expand_year(int(m.group(3)))
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_fecha_larga(text: str) -> Optional[date]:
    """
    "20 de agosto del 2025" / "20 de agosto de 2025" / "20 agosto 2025"
    """
    m = _LARGA_RE.match(lower_clean(text))
    if not m:
        return None

    month = MESES.get(m.group(2))
    if month is None:
        return None

    try:
        return date(int(m.group(3)), month, int(m.group(1)))
    except ValueError:
        return None


def parse_date_text(value) -> Optional[date]:
    """
    Convierte texto de celda a date cuando sea posible (año en (2000, 2100)).
    Si no puede, devuelve None.
    """
    if value is None:
        return None

    s = strip_label(str(value), "fecha", "fecha de auditoria")
    if not s:
        return None

    for parser in (parse_dmy, parse_fecha_larga):
        d = parser(s)
        if d is not None:
            return d if year_in_range(d) else None

    return None


def format_date(d: Optional[date]) -> str:
    """
    DD/MM/YYYY (formato usado en toda la app y en exportaciones).
    """
    if d is None:
        return ""
    return d.strftime("%d/%m/%Y")


def month_key(d: date) -> str:
    return f"{d.year}-{d.month:02d}"
