# tablero_auditorias/config.py

import os


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

    # Base de datos para la configuración de columnas y referencias de archivos.
    # Local: SQLite. Render entrega DATABASE_URL como postgres:// (deprecated)
    uri = os.getenv("DATABASE_URL", "sqlite:///tablero_auditorias.db")
    if uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)

    # Forzar driver pg8000 (para evitar psycopg2 en Render)
    # Si ya viene con driver, no lo tocamos
    if uri.startswith("postgresql://") and "+pg8000" not in uri:
        uri = uri.replace("postgresql://", "postgresql+pg8000://", 1)

    SQLALCHEMY_DATABASE_URI = uri
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Rutas de archivos
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")
    OUTPUT_FOLDER = os.getenv("OUTPUT_FOLDER", "outputs")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Marcadores de la fila de encabezado (separados por coma)
    HEADER_MARKERS = tuple(
        m.strip().upper() for m in os.getenv("HEADER_MARKERS", "CUMPLE,ITEMS").split(",") if m.strip()
    )

    # Lotes con errores en espera de aceptar/descartar (guardan los bytes subidos)
    PENDING_MAX_BATCHES = int(os.getenv("PENDING_MAX_BATCHES", "20"))
    PENDING_MAX_AGE_SECONDS = int(os.getenv("PENDING_MAX_AGE_SECONDS", "3600"))

    # Limite upload (50MB)
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    WTF_CSRF_ENABLED = False
