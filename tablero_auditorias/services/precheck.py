# tablero_auditorias/services/precheck.py

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from tablero_auditorias.parsers.checklist import ChecklistParser
from tablero_auditorias.parsers.column_config import ColumnConfig
from tablero_auditorias.parsers.detection import HEADER_MARKERS
from tablero_auditorias.parsers.errors import ChecklistError
from tablero_auditorias.utils.logging import get_logger

logger = get_logger("precheck")


@dataclass
class PrecheckIssue:
    level: str  # "ERROR" | "WARN"
    message: str
    context: Optional[dict] = None


@dataclass
class PrecheckReport:
    ok: bool
    file_name: str
    issues: List[PrecheckIssue]
    meta: Dict[str, Any]


def run_precheck(
    data: bytes, file_name: str, config: Optional[ColumnConfig], header_markers=HEADER_MARKERS
) -> PrecheckReport:
    """
    Verifica cómo se lee un archivo: dimensiones, encabezado detectado,
    etiquetas de metadatos, estado de la configuración y resultado del parse.
    """
    issues: List[PrecheckIssue] = []

    parser = ChecklistParser(config, header_markers)
    meta: Dict[str, Any] = parser.sniff(data)

    for msg in meta.pop("errors", []):
        issues.append(PrecheckIssue("ERROR", msg))
    for msg in meta.pop("warnings", []):
        issues.append(PrecheckIssue("WARN", msg))

    if not any(i.level == "ERROR" for i in issues):
        try:
            audit = parser.parse(data, file_name)
            meta["parsed"] = audit.to_dict(include_items=True)
        except ChecklistError as e:
            issues.append(PrecheckIssue("ERROR", str(e), {"stage": "parse"}))

    ok = not any(i.level == "ERROR" for i in issues)

    report = PrecheckReport(ok=ok, file_name=file_name, issues=issues, meta=meta)
    logger.info(f"Precheck file={file_name} ok={ok} issues={len(issues)}")
    return report


def report_to_dict(report: PrecheckReport) -> dict:
    d = asdict(report)
    d["issues"] = [asdict(i) for i in report.issues]
    return d
