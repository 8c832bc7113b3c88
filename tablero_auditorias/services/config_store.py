# tablero_auditorias/services/config_store.py

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Dict, Optional

from tablero_auditorias.extensions import db
from tablero_auditorias.models import ConfigEntry
from tablero_auditorias.parsers.column_config import ColumnConfig
from tablero_auditorias.parsers.errors import ConfigurationError
from tablero_auditorias.utils.logging import get_logger

logger = get_logger("config_store")

CONFIG_STORAGE_KEY = "excel-column-config"


class KeyValueStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class DatabaseKeyValueStore(KeyValueStore):
    """
    Tabla config_entries (requiere app context).
    """

    def get(self, key: str) -> Optional[str]:
        entry = db.session.get(ConfigEntry, key)
        return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        entry = db.session.get(ConfigEntry, key)
        if entry is None:
            db.session.add(ConfigEntry(key=key, value=value))
        else:
            entry.value = value
        db.session.commit()

    def delete(self, key: str) -> None:
        ConfigEntry.query.filter_by(key=key).delete(synchronize_session=False)
        db.session.commit()


class ColumnConfigStore:
    """
    Guarda/carga la ColumnConfig como blob JSON en un KeyValueStore.
    Blob ausente o ilegible -> None ("sin configuración").
    """

    def __init__(self, store: KeyValueStore, key: str = CONFIG_STORAGE_KEY):
        self.store = store
        self.key = key

    def load(self) -> Optional[ColumnConfig]:
        raw = self.store.get(self.key)
        if not raw:
            return None

        try:
            return ColumnConfig.from_dict(json.loads(raw))
        except (json.JSONDecodeError, ConfigurationError) as e:
            logger.warning(f"Configuración guardada ilegible key={self.key}: {e}")
            return None

    def save(self, config: ColumnConfig) -> None:
        self.store.set(self.key, json.dumps(config.to_dict(), ensure_ascii=False))
        logger.info(f"Configuración guardada key={self.key}")

    def clear(self) -> None:
        self.store.delete(self.key)
        logger.info(f"Configuración eliminada key={self.key}")


def database_config_store() -> ColumnConfigStore:
    return ColumnConfigStore(DatabaseKeyValueStore())
