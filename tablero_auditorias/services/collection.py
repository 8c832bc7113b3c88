# tablero_auditorias/services/collection.py

from __future__ import annotations

from typing import Callable, Dict, List, Sequence

from tablero_auditorias.parsers.column_config import ColumnConfig
from tablero_auditorias.parsers.records import AuditFile, AuditItem
from tablero_auditorias.services.batch_runner import BatchResult, reparse_files
from tablero_auditorias.services.stats import AuditStats, compute_stats
from tablero_auditorias.utils.logging import get_logger

logger = get_logger("collection")


def _unique_by_name(files: Sequence[AuditFile]) -> List[AuditFile]:
    """Un archivo por nombre; si se repite gana el último (igual que los bytes guardados)."""
    by_name: Dict[str, AuditFile] = {}
    for f in files:
        by_name.pop(f.file_name, None)
        by_name[f.file_name] = f
    return list(by_name.values())


class AuditCollection:
    """
    Auditorías cargadas en memoria. Toda modificación reemplaza la lista completa.
    """

    def __init__(self, files: Sequence[AuditFile] = ()):
        self._files: List[AuditFile] = list(files)

    @property
    def files(self) -> List[AuditFile]:
        return list(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def add_files(self, files: Sequence[AuditFile]) -> None:
        """
        Agrega al final. Un archivo con el mismo nombre reemplaza al anterior (clave natural).
        """
        incoming = _unique_by_name(files)
        names = {f.file_name for f in incoming}
        self._files = [f for f in self._files if f.file_name not in names] + incoming
        logger.info(f"Auditorías agregadas nuevas={len(incoming)} total={len(self._files)}")

    def replace(self, files: Sequence[AuditFile]) -> None:
        self._files = list(files)

    def clear(self) -> None:
        self._files = []
        logger.info("Auditorías eliminadas (reset)")

    def all_items(self) -> List[AuditItem]:
        return [it for f in self._files for it in f.items]

    def stats(self) -> AuditStats:
        return compute_stats(self._files)

    def reparse(self, load_blob: Callable[[str], bytes], config: ColumnConfig) -> BatchResult:
        """
        Vuelve a parsear todos los archivos con la configuración actual.
        Solo reemplaza si al menos uno salió bien; si ninguno, la colección queda igual.
        """
        result = reparse_files([f.file_name for f in self._files], load_blob, config)

        if result.succeeded:
            self.replace(result.succeeded)
        else:
            logger.warning(f"Re-parse sin éxitos; colección intacta archivos={len(self._files)}")

        return result


def commit_batch(
    collection: AuditCollection,
    result: BatchResult,
    uploads: Dict[str, bytes],
    save_blob: Callable[[str, bytes], object],
) -> List[AuditFile]:
    """
    Acepta los archivos exitosos de un lote: guarda sus bytes (para re-parsear) y los agrega.
    """
    accepted = _unique_by_name(result.succeeded)
    for f in accepted:
        save_blob(f.file_name, uploads[f.file_name])
    collection.add_files(accepted)
    return accepted
