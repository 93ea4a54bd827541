"""
LeaderDojo
Flask Application Factory.

Usage:
    from leaderdojo import create_app
    app = create_app()           # defaults to APP_ENV or "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask
from flask_cors import CORS
from sqlalchemy import engine as _sa_engine
from sqlalchemy import event as _sa_event

from leaderdojo.ai.gateway import build_gateway
from leaderdojo.config import config
from leaderdojo.middleware.logging_config import configure_logging
from leaderdojo.middleware.timing import init_request_timing
from leaderdojo.middleware.user_context import init_user_context
from leaderdojo.models import db

logger = logging.getLogger(__name__)


# ── SQLite FK enforcement (global engine event) ─────────────────────────
@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    # Instantiated so ProductionConfig can refuse to start without its secrets
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── AI gateway (one per app, injected into services by the routes) ──
    app.extensions["ai_gateway"] = build_gateway(app.config)

    # ── Middleware ───────────────────────────────────────────────────────
    init_request_timing(app)
    init_user_context(app)
    app.config.setdefault("MAX_CONTENT_LENGTH", 2 * 1024 * 1024)  # 2 MB

    # ── Import all models so create_all sees them ───────────────────────
    from leaderdojo.models import commitment as _commitment_models  # noqa: F401
    from leaderdojo.models import entry as _entry_models            # noqa: F401
    from leaderdojo.models import project as _project_models        # noqa: F401
    from leaderdojo.models import reflection as _reflection_models  # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS) ────────────────────────
    os.makedirs(app.instance_path, exist_ok=True)  # dev SQLite file lives here
    with app.app_context():
        db.create_all()

    # ── Blueprints & error handlers ──────────────────────────────────────
    from leaderdojo.blueprints import register_blueprints, register_error_handlers
    register_blueprints(app)
    register_error_handlers(app)

    logger.debug("App created: env=%s ai_provider=%s", config_name,
                 app.extensions["ai_gateway"].provider_name)
    return app
