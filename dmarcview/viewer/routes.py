"""
Viewer blueprint routes.

Provides two endpoints:
  GET  /      - upload form
  POST /view  - decode the uploaded report and show the rendering

Security controls:
- Only .xml, .gz and .zip file extensions are accepted on upload.
- Report size is capped at 1 MiB to prevent memory exhaustion.
- Filenames are never used as filesystem paths (no path traversal risk).
- Nothing is stored; the report lives only for the duration of the request.
"""

from __future__ import annotations

import logging

from flask import current_app, flash, redirect, render_template, url_for

from dmarcview.lookup.organization import build_organization_lookup
from dmarcview.report.decoder import DecodeContext, decode_bytes
from dmarcview.report.errors import DecodeError, XmlSyntax
from dmarcview.report.render import to_html
from dmarcview.report.source import unwrap_report
from dmarcview.viewer import bp
from dmarcview.viewer.forms import UploadReportForm

logger = logging.getLogger(__name__)

# Maximum report size accepted for upload (1 MiB).
_MAX_UPLOAD_BYTES: int = 1 * 1024 * 1024


def _org_lookup(choice: str):
    """Return the organization lookup for the backend picked on the form.

    An empty choice uses the application's shared (cached) lookup.
    """
    if not choice or choice == current_app.config.get("ORG_LOOKUP"):
        return current_app.extensions.get("org_lookup")
    overrides = dict(current_app.config)
    overrides["ORG_LOOKUP"] = choice
    return build_organization_lookup(overrides)


def _decode_context(lookup_choice: str) -> DecodeContext:
    return DecodeContext.from_config(current_app.config, org_lookup=_org_lookup(lookup_choice))


@bp.route("/", methods=["GET"])
def index():
    """Render the report upload page."""
    form = UploadReportForm()
    return render_template("viewer/index.html", form=form)


@bp.route("/view", methods=["POST"])
def view():
    """Decode an uploaded report and render it."""
    form = UploadReportForm()
    if not form.validate_on_submit():
        for errors in form.errors.values():
            for error in errors:
                flash(error, "danger")
        return redirect(url_for("viewer.index"))

    uploaded_file = form.report.data
    original_name = uploaded_file.filename or ""

    # Read one byte beyond the limit so we can detect oversized files
    # without storing the entire content first.
    try:
        raw_bytes = uploaded_file.read(_MAX_UPLOAD_BYTES + 1)
    except OSError as exc:
        logger.warning("Upload unreadable: filename=%r error=%s", original_name, exc)
        flash("Could not read the uploaded file.", "danger")
        return redirect(url_for("viewer.index"))

    if len(raw_bytes) > _MAX_UPLOAD_BYTES:
        logger.warning("Upload rejected - file too large: filename=%r", original_name)
        flash("File is too large. Maximum allowed size is 1 MB.", "danger")
        return redirect(url_for("viewer.index"))

    if not raw_bytes.strip():
        flash("The uploaded file is empty.", "warning")
        return redirect(url_for("viewer.index"))

    try:
        xml_bytes = unwrap_report(original_name, raw_bytes)
        document = decode_bytes(xml_bytes, _decode_context(form.lookup.data))
    except XmlSyntax as exc:
        logger.warning("Report rejected - XML syntax error: filename=%r error=%s", original_name, exc)
        flash(f"The report is not well-formed XML: {exc}", "danger")
        return redirect(url_for("viewer.index"))
    except DecodeError as exc:
        logger.warning("Report rejected: filename=%r error=%s", original_name, exc)
        flash(f"The report could not be decoded: {exc}", "danger")
        return redirect(url_for("viewer.index"))

    logger.info("Rendered report %r (%d bytes)", original_name, len(xml_bytes))
    return render_template(
        "viewer/report.html",
        filename=original_name,
        report_html=to_html(document),
    )

