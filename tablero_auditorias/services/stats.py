# tablero_auditorias/services/stats.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from tablero_auditorias.parsers.records import AuditFile, AuditItem, AuditStatus
from tablero_auditorias.utils.dates import month_key

TOP_PROBLEMATICOS = 10


@dataclass
class Bucket:
    """
    Agrupación (operación / auditor / mes). El cumplimiento es un promedio móvil:
      nuevo = (anterior * n + x) / (n + 1)
    """

    total: int = 0
    cumplimiento: float = 0.0
    auditorias: int = 0

    def add(self, total: int, cumplimiento: float) -> None:
        self.total += total
        self.cumplimiento = (self.cumplimiento * self.auditorias + cumplimiento) / (self.auditorias + 1)
        self.auditorias += 1

    def to_dict(self) -> Dict[str, Any]:
        return {"total": self.total, "cumplimiento": self.cumplimiento, "auditorias": self.auditorias}


@dataclass
class ProblemItem:
    pregunta: str
    categoria: str
    no_cumple: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pregunta": self.pregunta,
            "categoria": self.categoria,
            "noCumple": self.no_cumple,
            "frecuencia": self.no_cumple,
        }


@dataclass
class AuditStats:
    total_auditorias: int = 0
    total_items: int = 0
    cumplimiento_promedio: float = 0.0
    cumple: int = 0
    cumple_parcial: int = 0
    no_cumple: int = 0
    no_aplica: int = 0
    por_operacion: Dict[str, Bucket] = field(default_factory=dict)
    por_auditor: Dict[str, Bucket] = field(default_factory=dict)
    por_mes: Dict[str, Bucket] = field(default_factory=dict)
    items_mas_problematicos: List[ProblemItem] = field(default_factory=list)


def _add_to(buckets: Dict[str, Bucket], key: str, f: AuditFile) -> None:
    bucket = buckets.get(key)
    if bucket is None:
        bucket = buckets[key] = Bucket()
    bucket.add(f.total_items - f.no_aplica, f.cumplimiento)


def most_problematic(items: Iterable[AuditItem], limit: int = TOP_PROBLEMATICOS) -> List[ProblemItem]:
    """
    Ítems "No cumple" agrupados por (categoría, pregunta), más frecuentes primero.
    Empates: orden de aparición.
    """
    counter: Dict[tuple, ProblemItem] = {}
    for it in items:
        if it.estado is not AuditStatus.NO_CUMPLE:
            continue
        key = (it.categoria, it.pregunta)
        entry = counter.get(key)
        if entry is None:
            entry = counter[key] = ProblemItem(pregunta=it.pregunta, categoria=it.categoria)
        entry.no_cumple += 1

    ranked = sorted(counter.values(), key=lambda p: p.no_cumple, reverse=True)
    return ranked[:limit]


def compute_stats(files: Sequence[AuditFile]) -> AuditStats:
    """
    Totales desde los conteos de cada archivo (lo declarado en el Excel manda),
    promedio de cumplimiento por archivo y agrupaciones por operación/auditor/mes.
    """
    stats = AuditStats(total_auditorias=len(files))

    for f in files:
        stats.total_items += f.total_items
        stats.cumple += f.cumple
        stats.cumple_parcial += f.cumple_parcial
        stats.no_cumple += f.no_cumple
        stats.no_aplica += f.no_aplica

        _add_to(stats.por_operacion, f.operacion, f)
        _add_to(stats.por_auditor, f.auditor, f)
        _add_to(stats.por_mes, month_key(f.fecha), f)

    if files:
        stats.cumplimiento_promedio = sum(f.cumplimiento for f in files) / len(files)

    stats.items_mas_problematicos = most_problematic(it for f in files for it in f.items)
    return stats


def stats_to_dict(stats: AuditStats) -> Dict[str, Any]:
    return {
        "totalAuditorias": stats.total_auditorias,
        "totalItems": stats.total_items,
        "cumplimientoPromedio": stats.cumplimiento_promedio,
        "cumple": stats.cumple,
        "cumpleParcial": stats.cumple_parcial,
        "noCumple": stats.no_cumple,
        "noAplica": stats.no_aplica,
        "porOperacion": {k: b.to_dict() for k, b in stats.por_operacion.items()},
        "porAuditor": {k: b.to_dict() for k, b in stats.por_auditor.items()},
        "porMes": {k: b.to_dict() for k, b in sorted(stats.por_mes.items())},
        "itemsMasProblematicos": [p.to_dict() for p in stats.items_mas_problematicos],
    }


def filter_files(
    files: Iterable[AuditFile], operacion: Optional[str] = None, auditor: Optional[str] = None
) -> List[AuditFile]:
    out = []
    for f in files:
        if operacion is not None and f.operacion != operacion:
            continue
        if auditor is not None and f.auditor != auditor:
            continue
        out.append(f)
    return out


def compute_category_breakdown(items: Iterable[AuditItem], limit: int = 10) -> List[Dict[str, Any]]:
    """
    Cumplimiento por categoría (sin contar "No aplica"), mejor cumplimiento primero.
    """
    cats: Dict[str, Dict[str, int]] = {}
    for it in items:
        if it.estado is AuditStatus.NO_APLICA:
            continue
        c = cats.setdefault(it.categoria, {"cumple": 0, "cumple_parcial": 0, "no_cumple": 0, "total": 0})
        c["total"] += 1
        if it.estado is AuditStatus.CUMPLE:
            c["cumple"] += 1
        elif it.estado is AuditStatus.CUMPLE_PARCIAL:
            c["cumple_parcial"] += 1
        elif it.estado is AuditStatus.NO_CUMPLE:
            c["no_cumple"] += 1

    rows = []
    for categoria, c in cats.items():
        puntos = c["cumple"] * 1.0 + c["cumple_parcial"] * 0.5
        cumplimiento = (puntos / c["total"] * 100) if c["total"] else 0
        rows.append(
            {
                "categoria": categoria,
                "cumplimiento": round(cumplimiento, 1),
                "cumple": c["cumple"],
                "cumpleParcial": c["cumple_parcial"],
                "noCumple": c["no_cumple"],
                "total": c["total"],
            }
        )

    rows.sort(key=lambda r: r["cumplimiento"], reverse=True)
    return rows[:limit]


def build_annual_calendar(files: Sequence[AuditFile], year: Optional[int] = None) -> Dict[str, Any]:
    """
    Operación x mes del año: cumplimiento promedio (1 decimal) o None si no hubo auditoría.
    Año por defecto: el más reciente con auditorías.
    """
    if year is None:
        years = sorted({f.fecha.year for f in files})
        year = years[-1] if years else date.today().year

    operaciones = sorted({f.operacion for f in files})
    por_op_mes: Dict[str, Dict[int, Bucket]] = {op: {} for op in operaciones}

    for f in files:
        if f.fecha.year != year:
            continue
        meses = por_op_mes[f.operacion]
        bucket = meses.get(f.fecha.month)
        if bucket is None:
            bucket = meses[f.fecha.month] = Bucket()
        bucket.add(f.total_items - f.no_aplica, f.cumplimiento)

    rows = []
    for op in operaciones:
        meses = []
        for m in range(1, 13):
            b = por_op_mes[op].get(m)
            meses.append(round(b.cumplimiento, 1) if b else None)
        rows.append({"operacion": op, "meses": meses})

    return {"year": year, "rows": rows}
