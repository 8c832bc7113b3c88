# tablero_auditorias/parsers/checklist.py

from __future__ import annotations

from typing import Any, Dict, List, Optional

from tablero_auditorias.parsers.base import BaseParser
from tablero_auditorias.parsers.column_config import CellRef, ColumnConfig, require_valid, validate_config
from tablero_auditorias.parsers.detection import HEADER_MARKERS, CategoryTracker, find_header_row
from tablero_auditorias.parsers.errors import ConfigurationError, ExtractionError, HeaderNotFoundError, WorkbookError
from tablero_auditorias.parsers.grid import CellValue, Grid, load_grid, read_date, read_number, read_string
from tablero_auditorias.parsers.records import (
    CATEGORIA_DEFAULT,
    MIN_PREGUNTA_LEN,
    AuditFile,
    AuditItem,
    AuditStatus,
    compute_cumplimiento,
)
from tablero_auditorias.utils.logging import get_logger
from tablero_auditorias.utils.strings import strip_label

logger = get_logger("parser_checklist")

# Valores que marcan la columna de estado de una fila (comparados en minúscula)
STATUS_MARKERS = frozenset({"x", "✓", "✔", "v", "si", "sí"})

# Etiquetas que suelen aparecer en las primeras filas de la planilla
METADATA_LABELS = {
    "operacion": "Operación:",
    "responsable": "Responsable de la Operación:",
    "cliente": "Cliente:",
    "fecha": "Fecha:",
    "auditor": "Auditor:",
}


def is_marker(cell: CellValue) -> bool:
    return cell.as_text().lower() in STATUS_MARKERS


def detect_status(row: List[CellValue], config: ColumnConfig) -> Optional[AuditStatus]:
    """
    Orden fijo de prioridad: Cumple, Cumple parcialmente, No cumple, No aplica.
    Gana la primera columna marcada; sin marca -> None.
    """
    checks = (
        (config.cumple, AuditStatus.CUMPLE),
        (config.cumple_parcial, AuditStatus.CUMPLE_PARCIAL),
        (config.no_cumple, AuditStatus.NO_CUMPLE),
        (config.no_aplica, AuditStatus.NO_APLICA),
    )
    for col, estado in checks:
        if col is not None and 0 <= col < len(row) and is_marker(row[col]):
            return estado
    return None


def normalize_pct(value: Optional[float]) -> Optional[float]:
    """
    0..1 se interpreta como fracción (x100); mayor a 1 ya viene en 0..100.
    """
    if value is None:
        return None
    if 0 <= value <= 1:
        value = value * 100
    return round(value, 2)


def _row_is_empty(row: List[CellValue]) -> bool:
    return all(c.is_empty for c in row)


class ChecklistParser(BaseParser):
    """
    Parser de checklists de auditoría (primera hoja) guiado por ColumnConfig:
      - metadatos desde celdas configuradas (operación, fecha, responsable, cliente, auditor)
      - ítems desde las filas bajo el encabezado, con la categoría vigente
      - totales/porcentajes declarados por el Excel tienen prioridad sobre los calculados
    """

    def __init__(self, config: Optional[ColumnConfig], header_markers=HEADER_MARKERS):
        self.config = config
        self.header_markers = header_markers

    # ------------------------------------------------------------------
    # sniff
    # ------------------------------------------------------------------
    def sniff(self, data: bytes) -> Dict:
        meta: Dict[str, Any] = {"errors": [], "warnings": []}

        try:
            grid = load_grid(data)
        except WorkbookError as e:
            meta["errors"].append(str(e))
            return meta

        meta["total_rows"] = len(grid)
        meta["total_columns"] = max((len(r) for r in grid), default=0)

        try:
            meta["header_row_index"] = find_header_row(grid, self.header_markers)
        except HeaderNotFoundError as e:
            meta["header_row_index"] = None
            meta["warnings"].append(str(e))

        # etiquetas de metadatos en las primeras 10 filas
        head_text = " ".join(" ".join(c.as_text() for c in row) for row in grid[:10])
        meta["found_fields"] = {k: label in head_text for k, label in METADATA_LABELS.items()}

        config_errors = validate_config(self.config)
        meta["errors"].extend(config_errors)

        if not config_errors:
            hr = self.config.header_row_index
            detected = meta["header_row_index"]
            if detected is not None and detected != hr:
                meta["warnings"].append(
                    f"La fila de encabezado configurada ({hr}) no coincide con la detectada ({detected})."
                )
            if self.config.operacion_cell is None:
                meta["errors"].append("La celda de 'Operación' no está configurada")
            if self.config.fecha_cell is None:
                meta["errors"].append("La celda de 'Fecha' no está configurada")

        return meta

    # ------------------------------------------------------------------
    # parse
    # ------------------------------------------------------------------
    def parse(self, data: bytes, file_name: str) -> AuditFile:
        # la configuración se valida antes de decodificar el archivo
        self._check_config()
        return self.parse_grid(load_grid(data), file_name)

    def _check_config(self) -> ColumnConfig:
        config = require_valid(self.config)

        missing = []
        if config.operacion_cell is None:
            missing.append("Operación")
        if config.fecha_cell is None:
            missing.append("Fecha")
        if missing:
            raise ConfigurationError(
                "Configuración incompleta: falta la celda de " + ", ".join(f"'{m}'" for m in missing)
            )
        return config

    def _read_meta_string(self, grid: Grid, ref: Optional[CellRef], *labels: str) -> str:
        if ref is None:
            return ""
        return strip_label(read_string(grid, ref.row, ref.col), *labels)

    def _read_declared(self, grid: Grid, ref: Optional[CellRef]) -> Optional[float]:
        if ref is None:
            return None
        return read_number(grid, ref.row, ref.col)

    def parse_grid(self, grid: Grid, file_name: str) -> AuditFile:
        config = self._check_config()

        # 1) Metadatos
        operacion = self._read_meta_string(grid, config.operacion_cell, "operación", "operacion")
        if not operacion:
            raise ExtractionError(
                f"El campo requerido 'Operación' está vacío en la celda configurada "
                f"(fila {config.operacion_cell.row + 1}, columna {config.operacion_cell.col + 1})."
            )

        fecha = read_date(grid, config.fecha_cell.row, config.fecha_cell.col)

        responsable = self._read_meta_string(
            grid, config.responsable_cell, "responsable", "responsable de la operación"
        )
        cliente = self._read_meta_string(grid, config.cliente_cell, "cliente")
        auditor = self._read_meta_string(grid, config.auditor_cell, "auditor")

        # 2) Ítems
        items: List[AuditItem] = []
        tracker = CategoryTracker()
        counter = 0

        for i in range(config.header_row_index + 1, len(grid)):
            row = grid[i]
            if not row or _row_is_empty(row):
                continue

            if tracker.feed(row):
                continue

            pregunta = read_string(grid, i, config.pregunta)
            if len(pregunta) < MIN_PREGUNTA_LEN:
                continue

            estado = detect_status(row, config)
            if estado is None:
                continue

            counter += 1
            observacion = ""
            if config.observacion is not None:
                observacion = read_string(grid, i, config.observacion)

            items.append(
                AuditItem(
                    id=f"{file_name}-{counter}",
                    operacion=operacion,
                    responsable=responsable,
                    cliente=cliente,
                    fecha=fecha,
                    auditor=auditor,
                    categoria=tracker.categoria(CATEGORIA_DEFAULT),
                    item=str(counter),
                    pregunta=pregunta,
                    estado=estado,
                    observacion=observacion,
                )
            )

        # 3) Conteos: lo declarado en el Excel manda sobre lo calculado
        counts = {
            "total_items": len(items),
            "cumple": sum(1 for it in items if it.estado is AuditStatus.CUMPLE),
            "cumple_parcial": sum(1 for it in items if it.estado is AuditStatus.CUMPLE_PARCIAL),
            "no_cumple": sum(1 for it in items if it.estado is AuditStatus.NO_CUMPLE),
            "no_aplica": sum(1 for it in items if it.estado is AuditStatus.NO_APLICA),
        }
        declared_refs = {
            "total_items": config.total_items_cell,
            "cumple": config.cumple_cell,
            "cumple_parcial": config.cumple_parcial_cell,
            "no_cumple": config.no_cumple_cell,
            "no_aplica": config.no_aplica_cell,
        }
        overridden = []
        for key, ref in declared_refs.items():
            declared = self._read_declared(grid, ref)
            if declared is not None:
                counts[key] = int(round(declared))
                overridden.append(key)

        # 4) Cumplimiento: celda configurada o fórmula
        cumplimiento = normalize_pct(self._read_declared(grid, config.cumplimiento_cell))
        if cumplimiento is None:
            cumplimiento = compute_cumplimiento(
                counts["total_items"], counts["cumple"], counts["cumple_parcial"], counts["no_aplica"]
            )

        audit = AuditFile(
            file_name=file_name,
            operacion=operacion,
            responsable=responsable,
            cliente=cliente,
            fecha=fecha,
            auditor=auditor,
            items=items,
            cumplimiento=cumplimiento,
            total_items=counts["total_items"],
            cumple=counts["cumple"],
            cumple_parcial=counts["cumple_parcial"],
            no_cumple=counts["no_cumple"],
            no_aplica=counts["no_aplica"],
            cumple_pct=normalize_pct(self._read_declared(grid, config.cumple_pct_cell)),
            cumple_parcial_pct=normalize_pct(self._read_declared(grid, config.cumple_parcial_pct_cell)),
            no_cumple_pct=normalize_pct(self._read_declared(grid, config.no_cumple_pct_cell)),
            no_aplica_pct=normalize_pct(self._read_declared(grid, config.no_aplica_pct_cell)),
        )

        logger.info(
            f"Parse file={file_name} operacion={operacion} items={len(items)} "
            f"total={audit.total_items} cumplimiento={audit.cumplimiento} declarados={overridden}"
        )
        return audit
