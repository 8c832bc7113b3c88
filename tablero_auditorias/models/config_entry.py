# tablero_auditorias/models/config_entry.py

from datetime import datetime

from tablero_auditorias.extensions import db


class ConfigEntry(db.Model):
    """Par clave/valor (blob JSON serializado)."""

    __tablename__ = "config_entries"

    key = db.Column(db.String(120), primary_key=True)
    value = db.Column(db.Text, nullable=False)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
