"""
User Context Middleware: resolves the calling user for API requests.

Authentication happens upstream (identity provider / gateway). The verified
user id arrives in a trusted header (USER_ID_HEADER, default X-User-Id) and
is stored on ``g.user_id``. Every service call is scoped by that id.

API requests without a user id get 401, except the skip prefixes below.

Chain order:
  timing.py  →  user_context.py  →  route handler
"""

import logging

from flask import g, request

from leaderdojo.utils.errors import E, api_error

logger = logging.getLogger(__name__)

# Paths that need no user (probes only)
USER_SKIP_PREFIXES = (
    "/api/v1/health",
)


def current_user_id() -> str:
    """User id for the current request. Only valid inside an API route."""
    return g.user_id


def init_user_context(app):
    """Register user context middleware as a before_request hook."""

    header = app.config.get("USER_ID_HEADER", "X-User-Id")

    @app.before_request
    def _user_context():
        g.user_id = None

        if not request.path.startswith("/api/v1/"):
            return None
        for prefix in USER_SKIP_PREFIXES:
            if request.path.startswith(prefix):
                return None

        user_id = (request.headers.get(header) or "").strip()
        if not user_id:
            logger.info("Rejected %s %s: missing %s header", request.method, request.path, header)
            return api_error(E.UNAUTHENTICATED, "Authentication required")
        if len(user_id) > 64:
            return api_error(E.UNAUTHENTICATED, "Invalid user id")

        g.user_id = user_id
        return None
