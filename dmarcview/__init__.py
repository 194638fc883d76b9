"""
Flask application factory for the DMARC report viewer.

Creates and configures the Flask application, registers the viewer
blueprint, and initialises extensions (Flask-WTF) and the source IP
organization lookup shared by all requests.
"""

from __future__ import annotations

import logging
import sys

from flask import Flask, Response
from flask_wtf.csrf import CSRFProtect

from dmarcview.config import Config
from dmarcview.lookup.organization import build_organization_lookup

# ---------------------------------------------------------------------------
# Extension instances (created here, initialised in create_app)
# ---------------------------------------------------------------------------
csrf: CSRFProtect = CSRFProtect()

LOG_FORMAT: str = "%(asctime)s %(levelname)-8s %(name)s %(message)s"
LOG_DATE_FORMAT: str = "%Y-%m-%dT%H:%M:%SZ"


def _configure_logging(debug: bool) -> None:
    """Configure root logger for the application.

    Logging is sent to stdout so most WSGI hosts capture it automatically
    without requiring file handlers.

    Args:
        debug: When True, sets the root level to DEBUG.  Otherwise INFO.
    """
    level = logging.DEBUG if debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    root_logger = logging.getLogger()
    # Avoid adding duplicate handlers if create_app() is called multiple times
    # (e.g. in tests).
    if not root_logger.handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)


def create_app(config_object: object = Config) -> Flask:
    """Application factory.

    Args:
        config_object: Configuration class or object to load settings from.

    Returns:
        A fully configured Flask application instance.
    """
    app = Flask(__name__, template_folder="templates")
    app.config.from_object(config_object)

    _configure_logging(debug=app.debug)

    csrf.init_app(app)

    # One lookup (and cache) per application, shared across requests.
    app.extensions["org_lookup"] = build_organization_lookup(app.config)

    from dmarcview.viewer import bp as viewer_bp

    app.register_blueprint(viewer_bp)

    @app.after_request
    def set_security_headers(response: Response) -> Response:
        """Attach security-related HTTP response headers.

        'unsafe-inline' styles are required: rendered reports carry their
        styling in style attributes.
        """
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:;"
        )
        return response

    logging.getLogger(__name__).info(
        "Application created (org_lookup=%s, timezone=%s)",
        app.config.get("ORG_LOOKUP"),
        app.config.get("DISPLAY_TIMEZONE"),
    )
    return app
