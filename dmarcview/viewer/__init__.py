"""Viewer blueprint - upload a DMARC aggregate report and read it."""

from __future__ import annotations

from flask import Blueprint

bp: Blueprint = Blueprint("viewer", __name__)

from dmarcview.viewer import routes  # noqa: E402, F401
