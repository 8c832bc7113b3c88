# tablero_auditorias/parsers/errors.py


class ChecklistError(ValueError):
    """Error al leer/interpretar una planilla de auditoría."""


class ConfigurationError(ChecklistError):
    """Configuración de columnas ausente o incompleta."""


class DateParseError(ChecklistError):
    """No se pudo leer la fecha de la auditoría."""


class HeaderNotFoundError(ChecklistError):
    """No se encontró la fila de encabezado de la tabla."""


class ExtractionError(ChecklistError):
    """Dato obligatorio vacío en la planilla."""


class WorkbookError(ChecklistError):
    """El archivo no se pudo abrir como planilla."""
