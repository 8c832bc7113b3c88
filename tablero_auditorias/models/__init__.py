# tablero_auditorias/models/__init__.py

from .config_entry import ConfigEntry
from .stored_file import StoredFile
