"""
WSGI entry point.

Usage:
    flask --app wsgi run                   # development server
    gunicorn "wsgi:app"                    # production (APP_ENV=production)
"""

from leaderdojo import create_app

app = create_app()
