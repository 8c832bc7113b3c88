# tablero_auditorias/blueprints/health/routes.py

from flask import Blueprint, jsonify

from tablero_auditorias import get_state

health_bp = Blueprint("health", __name__)


@health_bp.route("/")
def health():
    return jsonify({"status": "healthy", "auditorias": len(get_state().collection)})
