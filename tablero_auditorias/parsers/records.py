# tablero_auditorias/parsers/records.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from tablero_auditorias.utils.dates import format_date

CATEGORIA_DEFAULT = "General"
MIN_PREGUNTA_LEN = 5


class AuditStatus(Enum):
    CUMPLE = "Cumple"
    CUMPLE_PARCIAL = "Cumple parcialmente"
    NO_CUMPLE = "No cumple"
    NO_APLICA = "No aplica"


@dataclass(frozen=True)
class AuditItem:
    id: str
    operacion: str
    responsable: str
    cliente: str
    fecha: date
    auditor: str
    categoria: str
    item: str
    pregunta: str
    estado: AuditStatus
    observacion: str = ""
    oportunidad_mejora: str = ""
    normativa: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "operacion": self.operacion,
            "responsable": self.responsable,
            "cliente": self.cliente,
            "fecha": format_date(self.fecha),
            "auditor": self.auditor,
            "categoria": self.categoria,
            "item": self.item,
            "pregunta": self.pregunta,
            "estado": self.estado.value,
            "observacion": self.observacion,
            "oportunidadMejora": self.oportunidad_mejora,
            "normativa": self.normativa,
        }


@dataclass
class AuditFile:
    file_name: str
    operacion: str
    responsable: str
    cliente: str
    fecha: date
    auditor: str
    items: List[AuditItem] = field(default_factory=list)
    cumplimiento: float = 0.0
    total_items: int = 0
    cumple: int = 0
    cumple_parcial: int = 0
    no_cumple: int = 0
    no_aplica: int = 0
    # porcentajes leídos desde el Excel (opcionales)
    cumple_pct: Optional[float] = None
    cumple_parcial_pct: Optional[float] = None
    no_cumple_pct: Optional[float] = None
    no_aplica_pct: Optional[float] = None

    def to_dict(self, include_items: bool = False) -> Dict[str, Any]:
        d = {
            "fileName": self.file_name,
            "operacion": self.operacion,
            "responsable": self.responsable,
            "cliente": self.cliente,
            "fecha": format_date(self.fecha),
            "auditor": self.auditor,
            "cumplimiento": self.cumplimiento,
            "totalItems": self.total_items,
            "cumple": self.cumple,
            "cumpleParcial": self.cumple_parcial,
            "noCumple": self.no_cumple,
            "noAplica": self.no_aplica,
            "cumplePct": self.cumple_pct,
            "cumpleParcialPct": self.cumple_parcial_pct,
            "noCumplePct": self.no_cumple_pct,
            "noAplicaPct": self.no_aplica_pct,
        }
        if include_items:
            d["items"] = [i.to_dict() for i in self.items]
        return d


def compute_cumplimiento(total_items, cumple, cumple_parcial, no_aplica) -> float:
    """
    ((cumple + 0.5 * parcial) / (total - no aplica)) * 100, redondeado a 2 decimales.
    Denominador 0 -> 0.
    """
    evaluados = total_items - no_aplica
    if evaluados <= 0:
        return 0.0
    return round(((cumple + cumple_parcial * 0.5) / evaluados) * 100, 2)
