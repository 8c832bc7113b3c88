# tablero_auditorias/models/stored_file.py

from datetime import datetime

from tablero_auditorias.extensions import db


class StoredFile(db.Model):
    __tablename__ = "stored_files"

    id = db.Column(db.Integer, primary_key=True)

    # nombre original del archivo: clave natural para volver a parsear
    original_name = db.Column(db.String(255), nullable=False, unique=True, index=True)
    stored_path = db.Column(db.String(500), nullable=False)
    file_hash = db.Column(db.String(64), nullable=False)
    size_bytes = db.Column(db.Integer, nullable=False, default=0)

    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow)
