# tablero_auditorias/services/batch_runner.py

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from tablero_auditorias.parsers.checklist import ChecklistParser
from tablero_auditorias.parsers.column_config import ColumnConfig
from tablero_auditorias.parsers.records import AuditFile
from tablero_auditorias.utils.logging import get_logger

logger = get_logger("batch_runner")


@dataclass
class FileOutcome:
    file_name: str
    ok: bool
    error: Optional[str] = None
    audit_file: Optional[AuditFile] = None

    def to_dict(self) -> dict:
        d = {"fileName": self.file_name, "ok": self.ok, "error": self.error}
        if self.audit_file is not None:
            d["auditFile"] = self.audit_file.to_dict()
        return d


@dataclass
class BatchResult:
    outcomes: List[FileOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[AuditFile]:
        return [o.audit_file for o in self.outcomes if o.ok]

    @property
    def failed(self) -> List[FileOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def to_dict(self) -> dict:
        return {
            "ok": len(self.succeeded),
            "failed": len(self.failed),
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


def _run_one(parser: ChecklistParser, file_name: str, load: Callable[[], bytes]) -> FileOutcome:
    try:
        audit = parser.parse(load(), file_name)
        return FileOutcome(file_name=file_name, ok=True, audit_file=audit)
    except Exception as e:
        logger.exception(f"Parse failed file={file_name}: {e}")
        return FileOutcome(file_name=file_name, ok=False, error=str(e))


def process_batch(uploads: Sequence[Tuple[str, bytes]], config: Optional[ColumnConfig]) -> BatchResult:
    """
    Procesa archivos uno por uno, en orden. Un archivo que falla no frena al resto.
    Nombres repetidos en el lote: se procesa solo el último (mismos bytes que se guardan).
    """
    parser = ChecklistParser(config)
    result = BatchResult()

    unique = dict(uploads)
    if len(unique) < len(uploads):
        logger.warning(f"Batch con nombres repetidos files={len(uploads)} unicos={len(unique)}")

    for file_name, data in unique.items():
        result.outcomes.append(_run_one(parser, file_name, lambda: data))

    logger.info(f"Batch files={len(unique)} ok={len(result.succeeded)} failed={len(result.failed)}")
    return result


def reparse_files(
    file_names: Sequence[str], load_blob: Callable[[str], bytes], config: Optional[ColumnConfig]
) -> BatchResult:
    """
    Re-ejecuta la extracción sobre los bytes guardados de cada archivo.
    """
    parser = ChecklistParser(config)
    result = BatchResult()

    for name in file_names:
        result.outcomes.append(_run_one(parser, name, lambda: load_blob(name)))

    logger.info(f"Reparse files={len(file_names)} ok={len(result.succeeded)} failed={len(result.failed)}")
    return result


PENDING_MAX_BATCHES = 20
PENDING_MAX_AGE_SECONDS = 60 * 60


@dataclass
class PendingBatch:
    id: str
    result: BatchResult
    uploads: Dict[str, bytes]
    created_at: float = 0.0


class PendingBatches:
    """
    Lotes con errores esperando decisión del usuario:
    aceptar solo los exitosos o descartar todo.
    Guardan los bytes subidos, así que se descartan por antigüedad y por cantidad.
    """

    def __init__(
        self,
        max_batches: int = PENDING_MAX_BATCHES,
        max_age_seconds: float = PENDING_MAX_AGE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_batches = max_batches
        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._batches: Dict[str, PendingBatch] = {}

    def __len__(self) -> int:
        return len(self._batches)

    def _evict(self) -> None:
        now = self._clock()
        expired = [b.id for b in self._batches.values() if now - b.created_at > self.max_age_seconds]
        for batch_id in expired:
            del self._batches[batch_id]

        # dict mantiene orden de inserción: los primeros son los más viejos
        overflow = max(0, len(self._batches) - self.max_batches)
        for batch_id in list(self._batches)[:overflow]:
            del self._batches[batch_id]

        if expired or overflow:
            logger.info(
                f"Lotes pendientes descartados vencidos={len(expired)} cupo={overflow} quedan={len(self._batches)}"
            )

    def hold(self, result: BatchResult, uploads: Sequence[Tuple[str, bytes]]) -> PendingBatch:
        batch = PendingBatch(
            id=uuid.uuid4().hex, result=result, uploads=dict(uploads), created_at=self._clock()
        )
        self._batches[batch.id] = batch
        self._evict()
        logger.info(f"Batch pendiente id={batch.id} ok={len(result.succeeded)} failed={len(result.failed)}")
        return batch

    def pop(self, batch_id: str) -> Optional[PendingBatch]:
        self._evict()
        return self._batches.pop(batch_id, None)

    def clear(self) -> None:
        self._batches = {}

    def __contains__(self, batch_id: str) -> bool:
        self._evict()
        return batch_id in self._batches
