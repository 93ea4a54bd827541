"""
Reflection Blueprint.

Endpoints:
    GET  /api/v1/reflections            list (period_type?, project_id?)
    POST /api/v1/reflections            save a reflection
    POST /api/v1/reflections/generate   AI questions + period stats (not saved)
"""

import logging

from flask import Blueprint, jsonify, request

from leaderdojo.ai import get_gateway
from leaderdojo.middleware.user_context import current_user_id
from leaderdojo.services import reflection_service
from leaderdojo.services.reflection_service import ReflectionService

logger = logging.getLogger(__name__)

reflection_bp = Blueprint("reflection", __name__, url_prefix="/api/v1/reflections")


@reflection_bp.route("", methods=["GET"])
def list_reflections():
    items = reflection_service.list_reflections(
        current_user_id(),
        period_type=request.args.get("period_type"),
        project_id=request.args.get("project_id"),
    )
    return jsonify({"items": [r.to_dict() for r in items], "total": len(items)}), 200


@reflection_bp.route("", methods=["POST"])
def save_reflection():
    """Body: { period_type?, period_start?, period_end?, questions_and_answers?,
    stats?, ai_questions?, project_id?, entry_id? }
    """
    data = request.get_json(silent=True) or {}
    reflection = reflection_service.save_reflection(current_user_id(), data)
    return jsonify(reflection.to_dict()), 201


@reflection_bp.route("/generate", methods=["POST"])
def generate_reflection():
    """Body: { period_type, period_start, period_end }"""
    data = request.get_json(silent=True) or {}
    result = ReflectionService(get_gateway()).generate(
        current_user_id(),
        data.get("period_type"),
        data.get("period_start"),
        data.get("period_end"),
    )
    return jsonify(result), 200
