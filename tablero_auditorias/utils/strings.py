# tablero_auditorias/utils/strings.py

import re
import unicodedata


def norm_text(value) -> str:
    """
    Normaliza texto:
    - string
    - trim
    - colapsa espacios
    - elimina tildes
    """
    if value is None:
        return ""

    s = str(value).strip()

    # quitar tildes: Operación -> Operacion
    s = unicodedata.normalize("NFD", s)
    s = "".join(c for c in s if unicodedata.category(c) != "Mn")

    # colapsar espacios
    s = re.sub(r"\s+", " ", s)

    return s


def lower_clean(value) -> str:
    return norm_text(value).lower()


def strip_label(value: str, *labels: str) -> str:
    """
    Quita una etiqueta inicial tipo "Fecha:" / "Operación:" si viene pegada al valor.
    La comparación ignora tildes y mayúsculas.
    """
    s = str(value or "").strip()
    if ":" not in s:
        return s

    head, tail = s.split(":", 1)
    head_clean = lower_clean(head)
    for label in labels:
        if head_clean == lower_clean(label):
            return tail.strip()
    return s
