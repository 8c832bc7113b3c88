# tablero_auditorias/blueprints/web/routes.py

import os

from flask import Blueprint, current_app, flash, redirect, render_template, send_file, url_for

from tablero_auditorias import get_state
from tablero_auditorias.blueprints.web.forms import ActionForm, BatchDecisionForm, UploadAuditForm
from tablero_auditorias.exporters.excel_export import export_items_to_excel
from tablero_auditorias.services.batch_runner import process_batch
from tablero_auditorias.services.collection import commit_batch
from tablero_auditorias.services.config_store import database_config_store
from tablero_auditorias.services.stats import compute_stats
from tablero_auditorias.services.storage import delete_all_files, load_file_bytes, save_file_bytes

web_bp = Blueprint("web", __name__)


def _save_blob(file_name: str, data: bytes):
    return save_file_bytes(file_name, data, current_app.config.get("UPLOAD_FOLDER", "uploads"))


@web_bp.route("/")
def home():
    collection = get_state().collection
    return render_template(
        "home.html",
        files=collection.files,
        stats=compute_stats(collection.files),
        has_config=database_config_store().load() is not None,
        action_form=ActionForm(),
    )


@web_bp.route("/upload", methods=["GET", "POST"])
def upload():
    form = UploadAuditForm()

    if form.validate_on_submit():
        uploads = [(fs.filename, fs.read()) for fs in form.archivos.data if fs and fs.filename]
        state = get_state()

        result = process_batch(uploads, database_config_store().load())

        if not result.failed:
            commit_batch(state.collection, result, dict(uploads), _save_blob)
            flash(f"{len(result.succeeded)} archivo(s) procesado(s) correctamente.", "success")
            return redirect(url_for("web.home"))

        # errores: mostrar el detalle y dejar decidir
        batch_id = state.pending.hold(result, uploads).id if result.succeeded else None
        decision = BatchDecisionForm(batch_id=batch_id)
        return render_template("batch.html", result=result, batch_id=batch_id, form=decision)

    if form.is_submitted():
        flash("Formulario inválido. Verifique los archivos.", "error")

    return render_template("upload.html", form=form)


@web_bp.route("/upload/decision", methods=["POST"])
def batch_decision():
    form = BatchDecisionForm()
    if not form.validate_on_submit():
        flash("Solicitud inválida.", "error")
        return redirect(url_for("web.upload"))

    state = get_state()
    batch = state.pending.pop(form.batch_id.data)
    if batch is None:
        flash("El lote ya no está disponible.", "warn")
        return redirect(url_for("web.upload"))

    if form.aceptar.data:
        accepted = commit_batch(state.collection, batch.result, batch.uploads, _save_blob)
        flash(f"Se agregaron {len(accepted)} archivo(s); los archivos con error se omitieron.", "success")
    else:
        flash("Lote descartado.", "warn")

    return redirect(url_for("web.home"))


@web_bp.route("/reparse", methods=["POST"])
def reparse():
    if not ActionForm().validate_on_submit():
        flash("Solicitud inválida.", "error")
        return redirect(url_for("web.home"))

    collection = get_state().collection
    result = collection.reparse(load_file_bytes, database_config_store().load())

    if result.succeeded:
        flash(f"Re-procesados {len(result.succeeded)} archivo(s).", "success")
    for o in result.failed:
        flash(f"{o.file_name}: {o.error}", "error")

    return redirect(url_for("web.home"))


@web_bp.route("/reset", methods=["POST"])
def reset():
    if not ActionForm().validate_on_submit():
        flash("Solicitud inválida.", "error")
        return redirect(url_for("web.home"))

    get_state().reset()
    delete_all_files()
    flash("Se eliminaron todas las auditorías cargadas.", "success")
    return redirect(url_for("web.home"))


@web_bp.route("/export")
def download_export():
    """
    Descarga el consolidado de ítems (outputs/auditorias-consolidadas.xlsx)
    """
    items = get_state().collection.all_items()
    if not items:
        flash("No hay ítems cargados para exportar.", "warn")
        return redirect(url_for("web.home"))

    output_folder = current_app.config.get("OUTPUT_FOLDER", "outputs")
    export_path = os.path.abspath(os.path.join(output_folder, "auditorias-consolidadas.xlsx"))
    export_items_to_excel(items, export_path)

    return send_file(export_path, as_attachment=True, download_name="auditorias-consolidadas.xlsx")
