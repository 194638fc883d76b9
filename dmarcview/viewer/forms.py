"""
Flask-WTF forms for the viewer blueprint.
"""

from __future__ import annotations

from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField, FileRequired
from wtforms import SelectField, SubmitField

from dmarcview.lookup.organization import LOOKUP_BACKENDS

ALLOWED_EXTENSIONS: tuple[str, ...] = ("xml", "gz", "zip")


class UploadReportForm(FlaskForm):
    """Upload form for one aggregate report (XML, or XML inside GZ/ZIP)."""

    report: FileField = FileField(
        "DMARC report",
        validators=[
            FileRequired(message="No file selected. Please choose a report to upload."),
            FileAllowed(
                ALLOWED_EXTENSIONS,
                message="Invalid file type. Only .xml, .gz and .zip files are accepted.",
            ),
        ],
        render_kw={"class": "form-control", "accept": ".xml,.gz,.zip"},
    )
    lookup: SelectField = SelectField(
        "Source IP owner lookup",
        choices=[("", "Server default")] + [(name, name) for name in LOOKUP_BACKENDS],
        default="",
        render_kw={"class": "form-select"},
    )
    submit: SubmitField = SubmitField("View report", render_kw={"class": "btn btn-primary"})
