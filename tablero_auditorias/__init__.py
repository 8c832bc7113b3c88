# tablero_auditorias/__init__.py

from flask import Flask, current_app

from .config import Config
from .extensions import db, migrate

EXTENSION_KEY = "tablero_auditorias"


class AuditState:
    """Estado en memoria de la app: auditorías cargadas y lotes pendientes."""

    def __init__(self, max_pending: int = 20, pending_max_age: float = 3600):
        from .services.batch_runner import PendingBatches
        from .services.collection import AuditCollection

        self.collection = AuditCollection()
        self.pending = PendingBatches(max_batches=max_pending, max_age_seconds=pending_max_age)

    def reset(self) -> None:
        self.collection.clear()
        self.pending.clear()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Inicializar extensiones
    db.init_app(app)
    migrate.init_app(app, db)

    from . import models  # noqa: F401  (registra tablas)

    with app.app_context():
        db.create_all()

    app.extensions[EXTENSION_KEY] = AuditState(
        max_pending=app.config.get("PENDING_MAX_BATCHES", 20),
        pending_max_age=app.config.get("PENDING_MAX_AGE_SECONDS", 3600),
    )

    # Registrar blueprints
    from .blueprints.web.routes import web_bp
    from .blueprints.api.routes import api_bp
    from .blueprints.health.routes import health_bp

    app.register_blueprint(web_bp)
    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(health_bp, url_prefix="/health")

    return app


def get_state() -> AuditState:
    return current_app.extensions[EXTENSION_KEY]
