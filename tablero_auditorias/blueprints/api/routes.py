# tablero_auditorias/blueprints/api/routes.py

import os

from flask import Blueprint, current_app, jsonify, request, send_file

from tablero_auditorias import get_state
from tablero_auditorias.exporters.excel_export import export_calendar_to_excel, export_items_to_excel
from tablero_auditorias.parsers.column_config import ColumnConfig, validate_config
from tablero_auditorias.parsers.detection import HEADER_MARKERS
from tablero_auditorias.parsers.errors import ChecklistError
from tablero_auditorias.services.batch_runner import process_batch
from tablero_auditorias.services.collection import commit_batch
from tablero_auditorias.services.config_store import database_config_store
from tablero_auditorias.services.precheck import report_to_dict, run_precheck
from tablero_auditorias.services.stats import (
    build_annual_calendar,
    compute_category_breakdown,
    compute_stats,
    filter_files,
    stats_to_dict,
)
from tablero_auditorias.services.storage import delete_all_files, load_file_bytes, save_file_bytes

api_bp = Blueprint("api", __name__)


@api_bp.errorhandler(ChecklistError)
def handle_checklist_error(e):
    return jsonify({"error": str(e)}), 400


def _save_blob(file_name: str, data: bytes):
    return save_file_bytes(file_name, data, current_app.config.get("UPLOAD_FOLDER", "uploads"))


def _read_uploads(field: str):
    uploads = []
    for fs in request.files.getlist(field):
        if not fs or not fs.filename:
            continue
        uploads.append((fs.filename, fs.read()))
    return uploads


@api_bp.route("/ping")
def ping():
    return jsonify({"status": "ok"})


# ------------------------------------------------------------------
# Configuración de columnas
# ------------------------------------------------------------------
@api_bp.route("/config", methods=["GET"])
def get_config():
    config = database_config_store().load()
    return jsonify({
        "config": config.to_dict() if config else None,
        "errors": validate_config(config),
    })


@api_bp.route("/config", methods=["PUT"])
def put_config():
    payload = request.get_json(silent=True)
    config = ColumnConfig.from_dict(payload)

    errors = validate_config(config)
    if errors:
        return jsonify({"error": "Configuración incompleta", "errors": errors}), 422

    database_config_store().save(config)
    return jsonify({"config": config.to_dict(), "errors": []})


@api_bp.route("/config", methods=["DELETE"])
def delete_config():
    database_config_store().clear()
    return jsonify({"status": "cleared"})


# ------------------------------------------------------------------
# Carga de archivos (lotes)
# ------------------------------------------------------------------
@api_bp.route("/uploads", methods=["POST"])
def upload_files():
    uploads = _read_uploads("files")
    if not uploads:
        return jsonify({"error": "No se recibieron archivos."}), 400

    state = get_state()
    result = process_batch(uploads, database_config_store().load())

    body = {"batch": result.to_dict(), "batchId": None, "accepted": False}

    if not result.failed:
        commit_batch(state.collection, result, dict(uploads), _save_blob)
        body["accepted"] = True
    elif result.succeeded:
        # hay errores: el usuario decide si acepta los exitosos o descarta todo
        body["batchId"] = state.pending.hold(result, uploads).id

    return jsonify(body)


@api_bp.route("/uploads/<batch_id>/accept", methods=["POST"])
def accept_batch(batch_id: str):
    state = get_state()
    batch = state.pending.pop(batch_id)
    if batch is None:
        return jsonify({"error": f"Lote no encontrado: {batch_id}"}), 404

    accepted = commit_batch(state.collection, batch.result, batch.uploads, _save_blob)
    return jsonify({"accepted": [f.file_name for f in accepted]})


@api_bp.route("/uploads/<batch_id>/discard", methods=["POST"])
def discard_batch(batch_id: str):
    batch = get_state().pending.pop(batch_id)
    if batch is None:
        return jsonify({"error": f"Lote no encontrado: {batch_id}"}), 404
    return jsonify({"discarded": [o.file_name for o in batch.result.outcomes]})


# ------------------------------------------------------------------
# Colección en memoria
# ------------------------------------------------------------------
@api_bp.route("/files", methods=["GET"])
def list_files():
    return jsonify([f.to_dict() for f in get_state().collection.files])


@api_bp.route("/files", methods=["DELETE"])
def clear_files():
    get_state().reset()
    removed = delete_all_files()
    return jsonify({"status": "cleared", "removedBlobs": removed})


@api_bp.route("/reparse", methods=["POST"])
def reparse():
    collection = get_state().collection
    if not len(collection):
        return jsonify({"error": "No hay auditorías cargadas para volver a procesar."}), 400

    result = collection.reparse(load_file_bytes, database_config_store().load())
    return jsonify({"batch": result.to_dict(), "replaced": bool(result.succeeded)})


# ------------------------------------------------------------------
# Estadísticas
# ------------------------------------------------------------------
def _filtered_files():
    return filter_files(
        get_state().collection.files,
        operacion=request.args.get("operacion") or None,
        auditor=request.args.get("auditor") or None,
    )


@api_bp.route("/stats")
def stats():
    return jsonify(stats_to_dict(compute_stats(_filtered_files())))


@api_bp.route("/items")
def items():
    return jsonify([it.to_dict() for f in _filtered_files() for it in f.items])


@api_bp.route("/categories")
def categories():
    items = [it for f in _filtered_files() for it in f.items]
    return jsonify(compute_category_breakdown(items, limit=request.args.get("limit", 10, type=int)))


@api_bp.route("/calendar")
def calendar():
    year = request.args.get("year", type=int)
    return jsonify(build_annual_calendar(get_state().collection.files, year=year))


@api_bp.route("/precheck", methods=["POST"])
def precheck():
    uploads = _read_uploads("file")
    if not uploads:
        return jsonify({"error": "No se recibió archivo."}), 400

    file_name, data = uploads[0]
    report = run_precheck(
        data, file_name, database_config_store().load(), current_app.config.get("HEADER_MARKERS", HEADER_MARKERS)
    )
    return jsonify(report_to_dict(report))


# ------------------------------------------------------------------
# Exportaciones
# ------------------------------------------------------------------
def _output_path(name: str) -> str:
    return os.path.abspath(os.path.join(current_app.config.get("OUTPUT_FOLDER", "outputs"), name))


@api_bp.route("/export/items.xlsx")
def export_items():
    out = export_items_to_excel(get_state().collection.all_items(), _output_path("auditorias-consolidadas.xlsx"))
    return send_file(out, as_attachment=True, download_name="auditorias-consolidadas.xlsx")


@api_bp.route("/export/calendar.xlsx")
def export_calendar():
    cal = build_annual_calendar(get_state().collection.files, year=request.args.get("year", type=int))
    name = f"calendario-cumplimiento-{cal['year']}.xlsx"
    out = export_calendar_to_excel(cal, _output_path(name))
    return send_file(out, as_attachment=True, download_name=name)
