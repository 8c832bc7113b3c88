# tablero_auditorias/blueprints/web/forms.py

from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileRequired, MultipleFileField
from wtforms import HiddenField, SubmitField
from wtforms.validators import DataRequired


class UploadAuditForm(FlaskForm):
    archivos = MultipleFileField(
        "Checklists de auditoría (.xlsx)",
        validators=[
            FileRequired("Seleccione al menos un archivo."),
            FileAllowed(["xlsx"], "Solo se permiten archivos .xlsx"),
        ],
    )

    submit = SubmitField("Procesar")


class BatchDecisionForm(FlaskForm):
    batch_id = HiddenField(validators=[DataRequired()])
    aceptar = SubmitField("Aceptar archivos correctos")
    descartar = SubmitField("Descartar todo")


class ActionForm(FlaskForm):
    """Botón simple (re-procesar, limpiar); solo aporta CSRF."""

    submit = SubmitField("Confirmar")
