"""
WSGI entry point for the DMARC report viewer.

WSGI hosts import this module and look for the ``app`` variable.  The
development server can also be started by running this file directly.

=============================================================================
DEPLOYMENT
=============================================================================

1. INSTALL
     pip install .

2. SET ENVIRONMENT VARIABLES
     SECRET_KEY=<a-long-random-string>
     DISPLAY_TIMEZONE=Europe/Amsterdam   (optional, default UTC)
     ORG_LOOKUP=cymru                    (optional: none, ip-api, cymru)

   You can generate a SECRET_KEY with:
     python -c "import secrets; print(secrets.token_hex(32))"

   Never commit the SECRET_KEY to version control.

3. POINT THE WSGI SERVER AT ``wsgi:app``, for example:
     gunicorn wsgi:app

   The viewer stores nothing; no database or scheduled task is needed.

=============================================================================
LOCAL DEVELOPMENT
=============================================================================

Run the Flask development server with:

  export SECRET_KEY=dev-only-not-for-production
  python wsgi.py

The app will be available at http://127.0.0.1:5000/

For testing:

  pip install -e ".[test]"
  pytest tests/ -v

=============================================================================
"""

from __future__ import annotations

from dmarcview import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=True)
