"""
Capture Blueprint.

Endpoints:
    POST /api/v1/capture                  capture an entry (+ commitment / reflection)
    GET  /api/v1/capture?project_id=...   captured entries for a project

POST responses:
    201  { entry_id, commitment_id?, reflection_id? }
    207  entry saved but a dependent write failed (details list failed_steps)
    400  validation error, nothing saved
    404  project not found, nothing saved
"""

import logging

from flask import Blueprint, jsonify, request

from leaderdojo.blueprints import limit_arg
from leaderdojo.middleware.user_context import current_user_id
from leaderdojo.services import capture_service
from leaderdojo.utils.errors import E, api_error

logger = logging.getLogger(__name__)

capture_bp = Blueprint("capture", __name__, url_prefix="/api/v1/capture")


@capture_bp.route("", methods=["POST"])
def capture():
    data = request.get_json(silent=True)
    if data is None:
        return api_error(E.VALIDATION_REQUIRED, "JSON body is required")
    result = capture_service.capture(current_user_id(), data)
    return jsonify(result.to_dict()), 201


@capture_bp.route("", methods=["GET"])
def list_captures():
    project_id = request.args.get("project_id")
    if not project_id:
        return api_error(E.VALIDATION_REQUIRED, "project_id is required")
    items = capture_service.list_captures(current_user_id(), project_id, limit=limit_arg())
    return jsonify({"items": [e.to_dict() for e in items], "total": len(items)}), 200
