"""
LeaderDojo
Blueprint registry and shared request helpers.
"""

import logging

from flask import request

from leaderdojo.core.exceptions import (
    AIUnavailableError,
    NotFoundError,
    PartialCaptureError,
    ValidationError,
)
from leaderdojo.utils.errors import E, api_error

logger = logging.getLogger(__name__)

AI_UNAVAILABLE_MESSAGE = (
    "AI service is unavailable. Your entry was saved; try again in a moment."
)


def arg_list(name):
    """Comma-separated (or repeated) query parameter as a list; None when absent."""
    values = []
    for raw in request.args.getlist(name):
        values.extend(v.strip() for v in raw.split(",") if v.strip())
    return values or None


def limit_arg(default=None, max_limit=200):
    """``?limit=`` capped at max_limit; bad input falls back to default."""
    try:
        value = int(request.args.get("limit", default or 0))
    except (ValueError, TypeError):
        return default
    if value <= 0:
        return default
    return min(value, max_limit)


def register_blueprints(app):
    from leaderdojo.blueprints.capture_bp import capture_bp
    from leaderdojo.blueprints.commitment_bp import commitment_bp
    from leaderdojo.blueprints.dashboard_bp import dashboard_bp
    from leaderdojo.blueprints.entry_bp import entry_bp
    from leaderdojo.blueprints.export_bp import export_bp
    from leaderdojo.blueprints.health_bp import health_bp
    from leaderdojo.blueprints.project_bp import project_bp
    from leaderdojo.blueprints.reflection_bp import reflection_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(project_bp)
    app.register_blueprint(capture_bp)
    app.register_blueprint(entry_bp)
    app.register_blueprint(commitment_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(reflection_bp)
    app.register_blueprint(export_bp)


def register_error_handlers(app):
    """Map service exceptions onto the standard error envelope, app-wide."""

    @app.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        logger.info("Not found: %s", error)
        return api_error(E.NOT_FOUND, f"{error.resource} not found")

    @app.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        return api_error(E.VALIDATION_INVALID, str(error), details=error.details)

    @app.errorhandler(AIUnavailableError)
    def _handle_ai_unavailable(error: AIUnavailableError):
        return api_error(
            E.AI_UNAVAILABLE,
            AI_UNAVAILABLE_MESSAGE,
            details={"reason": error.reason, "operation": error.purpose},
        )

    @app.errorhandler(PartialCaptureError)
    def _handle_partial_capture(error: PartialCaptureError):
        return api_error(
            E.PARTIAL_CAPTURE,
            "Entry saved, but some related records could not be created",
            details={**error.result.to_dict(), "failed_steps": error.failed_steps},
        )

    @app.errorhandler(404)
    def _not_found(e):
        return {"error": "Not found", "path": request.path}, 404

    @app.errorhandler(405)
    def _method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(500)
    def _server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return api_error(E.INTERNAL, "Internal server error")
