# tablero_auditorias/services/storage.py

import hashlib
import os

from werkzeug.utils import secure_filename

from tablero_auditorias.extensions import db
from tablero_auditorias.models import StoredFile
from tablero_auditorias.utils.logging import get_logger

logger = get_logger("storage")


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        logger.warning(f"Archivo ya no existe en disco: {path}")


def save_file_bytes(original_name: str, data: bytes, base_upload_folder: str) -> StoredFile:
    """
    Guarda los bytes en: uploads/<hash[:12]>_<archivo.xlsx>
    y registra/actualiza la referencia por nombre original.
    """
    if not original_name:
        raise ValueError("No file name provided")

    file_hash = sha256_bytes(data)
    safe_name = secure_filename(original_name) or "archivo.xlsx"

    ensure_dir(base_upload_folder)
    stored_path = os.path.join(base_upload_folder, f"{file_hash[:12]}_{safe_name}")
    with open(stored_path, "wb") as f:
        f.write(data)

    ref = StoredFile.query.filter_by(original_name=original_name).first()
    previous_path = None
    if ref is None:
        ref = StoredFile(original_name=original_name)
        db.session.add(ref)
    elif ref.stored_path != stored_path:
        previous_path = ref.stored_path
    ref.stored_path = stored_path
    ref.file_hash = file_hash
    ref.size_bytes = len(data)
    db.session.commit()

    # mismo nombre con otro contenido: el archivo anterior queda huérfano
    if previous_path and not StoredFile.query.filter_by(stored_path=previous_path).count():
        _remove_quietly(previous_path)

    logger.info(f"Saved file name={original_name} hash={file_hash} bytes={len(data)}")
    return ref


def load_file_bytes(original_name: str) -> bytes:
    """
    Bytes originales de un archivo ya subido (para re-parsear).
    """
    ref = StoredFile.query.filter_by(original_name=original_name).first()
    if ref is None:
        raise FileNotFoundError(f"No hay archivo guardado para '{original_name}'.")

    with open(ref.stored_path, "rb") as f:
        return f.read()


def delete_all_files() -> int:
    """
    Borra archivos y referencias (reset). Retorna cantidad de referencias borradas.
    """
    refs = StoredFile.query.all()
    for ref in refs:
        _remove_quietly(ref.stored_path)

    count = StoredFile.query.delete(synchronize_session=False)
    db.session.commit()
    logger.info(f"Archivos eliminados refs={count}")
    return count
