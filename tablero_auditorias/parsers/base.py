# tablero_auditorias/parsers/base.py

from abc import ABC, abstractmethod
from typing import Dict

from tablero_auditorias.parsers.records import AuditFile


class BaseParser(ABC):
    @abstractmethod
    def sniff(self, data: bytes) -> Dict:
        """
        Retorna metadatos + errores/warnings si el archivo no cuadra con el formato.
        Debe ser rápido y no lanzar por problemas del contenido.
        """
        raise NotImplementedError

    @abstractmethod
    def parse(self, data: bytes, file_name: str) -> AuditFile:
        """
        Retorna la auditoría extraída del archivo.
        """
        raise NotImplementedError
