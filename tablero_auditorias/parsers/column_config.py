# tablero_auditorias/parsers/column_config.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tablero_auditorias.parsers.errors import ConfigurationError


@dataclass(frozen=True)
class CellRef:
    row: int
    col: int

    def to_dict(self) -> Dict[str, int]:
        return {"row": self.row, "col": self.col}


# Columnas obligatorias: atributo -> (clave serializada, etiqueta para mensajes)
REQUIRED_COLUMNS = {
    "pregunta": ("pregunta", "Pregunta"),
    "cumple": ("cumple", "Cumple"),
    "cumple_parcial": ("cumpleParcial", "Cumple Parcial"),
    "no_cumple": ("noCumple", "No Cumple"),
    "no_aplica": ("noAplica", "No Aplica"),
    "header_row_index": ("headerRowIndex", "Fila de encabezado"),
}

# Celdas opcionales: atributo -> clave serializada
CELL_KEYS = {
    "total_items_cell": "totalItemsCell",
    "cumple_cell": "cumpleCell",
    "cumple_parcial_cell": "cumpleParcialCell",
    "no_cumple_cell": "noCumpleCell",
    "no_aplica_cell": "noAplicaCell",
    "cumple_pct_cell": "cumplePctCell",
    "cumple_parcial_pct_cell": "cumpleParcialPctCell",
    "no_cumple_pct_cell": "noCumplePctCell",
    "no_aplica_pct_cell": "noAplicaPctCell",
    "operacion_cell": "operacionCell",
    "fecha_cell": "fechaCell",
    "responsable_cell": "responsableCell",
    "cliente_cell": "clienteCell",
    "auditor_cell": "auditorCell",
}


@dataclass(frozen=True)
class ColumnConfig:
    """
    Dónde vive cada dato dentro de la planilla (índices base 0).

    Columnas de la tabla de ítems: pregunta + 4 estados (+ observación opcional).
    Celdas sueltas: metadatos (operación, fecha, ...) y totales declarados por el Excel.
    """

    pregunta: Optional[int] = None
    cumple: Optional[int] = None
    cumple_parcial: Optional[int] = None
    no_cumple: Optional[int] = None
    no_aplica: Optional[int] = None
    header_row_index: Optional[int] = None
    observacion: Optional[int] = None

    cumplimiento_cell: Optional[CellRef] = None

    total_items_cell: Optional[CellRef] = None
    cumple_cell: Optional[CellRef] = None
    cumple_parcial_cell: Optional[CellRef] = None
    no_cumple_cell: Optional[CellRef] = None
    no_aplica_cell: Optional[CellRef] = None

    cumple_pct_cell: Optional[CellRef] = None
    cumple_parcial_pct_cell: Optional[CellRef] = None
    no_cumple_pct_cell: Optional[CellRef] = None
    no_aplica_pct_cell: Optional[CellRef] = None

    operacion_cell: Optional[CellRef] = None
    fecha_cell: Optional[CellRef] = None
    responsable_cell: Optional[CellRef] = None
    cliente_cell: Optional[CellRef] = None
    auditor_cell: Optional[CellRef] = None

    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    def status_columns(self) -> List[int]:
        return [self.cumple, self.cumple_parcial, self.no_cumple, self.no_aplica]

    def to_dict(self) -> Dict[str, Any]:
        """
        Forma serializada (JSON) con las claves camelCase históricas.
        """
        out: Dict[str, Any] = {}
        for attr, (key, _) in REQUIRED_COLUMNS.items():
            out[key] = getattr(self, attr)
        out["observacion"] = self.observacion

        cc = self.cumplimiento_cell
        out["cumplimientoRow"] = cc.row if cc else None
        out["cumplimientoCol"] = cc.col if cc else None

        for attr, key in CELL_KEYS.items():
            ref = getattr(self, attr)
            out[key] = ref.to_dict() if ref else None

        for k, v in self.extra.items():
            out.setdefault(k, v)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColumnConfig":
        """
        Inverso de to_dict. Claves faltantes quedan en None (validate_config las reporta);
        tipos inválidos -> ConfigurationError.
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Configuración de columnas inválida: se esperaba un objeto JSON.")

        kwargs: Dict[str, Any] = {}
        known = set()

        for attr, (key, label) in REQUIRED_COLUMNS.items():
            kwargs[attr] = _opt_int(data.get(key), label)
            known.add(key)

        kwargs["observacion"] = _opt_int(data.get("observacion"), "Observación")
        known.add("observacion")

        row = _opt_int(data.get("cumplimientoRow"), "Cumplimiento (fila)")
        col = _opt_int(data.get("cumplimientoCol"), "Cumplimiento (columna)")
        if row is not None and col is not None and row >= 0 and col >= 0:
            kwargs["cumplimiento_cell"] = CellRef(row, col)
        known.update(("cumplimientoRow", "cumplimientoCol"))

        for attr, key in CELL_KEYS.items():
            kwargs[attr] = _cell_ref(data.get(key), key)
            known.add(key)

        kwargs["extra"] = {k: v for k, v in data.items() if k not in known}
        return cls(**kwargs)


def _opt_int(value: Any, label: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigurationError(f"Valor inválido para '{label}': {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ConfigurationError(f"Valor inválido para '{label}': {value!r}")


def _cell_ref(value: Any, key: str) -> Optional[CellRef]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ConfigurationError(f"Celda inválida para '{key}': {value!r}")

    row = _opt_int(value.get("row"), f"{key}.row")
    col = _opt_int(value.get("col"), f"{key}.col")
    if row is None or col is None or row < 0 or col < 0:
        return None
    return CellRef(row, col)


def validate_config(config: Optional[ColumnConfig]) -> List[str]:
    """
    Retorna lista de errores (vacía si la configuración sirve para extraer).
    """
    if config is None:
        return [
            "No hay configuración de Excel guardada. Por favor, configura las columnas y campos primero."
        ]

    errors = []
    for attr, (_, label) in REQUIRED_COLUMNS.items():
        value = getattr(config, attr)
        if value is None or value < 0:
            if attr == "header_row_index":
                errors.append("La fila de encabezado no está configurada")
            else:
                errors.append(f"La columna '{label}' no está configurada")

    if config.observacion is not None and config.observacion < 0:
        errors.append("La columna 'Observación' tiene un índice inválido")

    return errors


def require_valid(config: Optional[ColumnConfig]) -> ColumnConfig:
    errors = validate_config(config)
    if errors:
        if config is None:
            raise ConfigurationError(errors[0])
        raise ConfigurationError("Configuración incompleta: " + ", ".join(errors))
    return config