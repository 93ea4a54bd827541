"""Standard JSON error envelope.

Every error response has the same body:

    {"error": "<message>", "code": "ERR_...", "details": {...}?}

Usage
-----
    from leaderdojo.utils.errors import api_error, E

    return api_error(E.NOT_FOUND, "Entry not found")
    return api_error(E.VALIDATION_REQUIRED, "project_id is required")
"""

from __future__ import annotations

from flask import jsonify


# ── Error codes ───────────────────────────────────────────────────────
class E:
    """Machine-readable error codes (``code`` in the envelope)."""

    # 400
    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"

    # 401: no trusted user id on the request
    UNAUTHENTICATED = "ERR_UNAUTHENTICATED"

    # 404: missing, or owned by another user
    NOT_FOUND = "ERR_NOT_FOUND"

    # 207: entry saved, a dependent capture write failed
    PARTIAL_CAPTURE = "ERR_PARTIAL_CAPTURE"

    # 500
    DATABASE = "ERR_DATABASE"
    INTERNAL = "ERR_INTERNAL"

    # 503: AI provider failed or answered with the wrong shape
    AI_UNAVAILABLE = "ERR_AI_UNAVAILABLE"


_STATUS_BY_CODE: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.UNAUTHENTICATED: 401,
    E.NOT_FOUND: 404,
    E.PARTIAL_CAPTURE: 207,
    E.DATABASE: 500,
    E.INTERNAL: 500,
    E.AI_UNAVAILABLE: 503,
}


def api_error(code: str, message: str, *, status: int | None = None, details: dict | None = None):
    """Build ``(response, status)`` for a Flask view or error handler.

    ``status`` overrides the code's default; unknown codes map to 400.
    ``details`` is omitted from the body when empty.
    """
    body: dict = {"error": message, "code": code}
    if details:
        body["details"] = details
    return jsonify(body), status or _STATUS_BY_CODE.get(code, 400)
