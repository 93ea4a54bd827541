"""
Entry Blueprint.

Endpoints:
  Entry:          GET/PUT/DELETE  /entries/<entry_id>
  Decision flag:  POST     /entries/<entry_id>/decision
  Summarize:      POST     /entries/<entry_id>/summarize
  Accept:         POST     /entries/<entry_id>/commitments

Summarize returns 503 when the AI provider fails; the entry itself is
already saved and unchanged.
"""

import logging

from flask import Blueprint, jsonify, request

from leaderdojo.ai import get_gateway
from leaderdojo.middleware.user_context import current_user_id
from leaderdojo.services import entry_service
from leaderdojo.services.summarization_service import (
    EntrySummarizer,
    create_commitments_from_suggestions,
)

logger = logging.getLogger(__name__)

entry_bp = Blueprint("entry", __name__, url_prefix="/api/v1/entries")


@entry_bp.route("/<entry_id>", methods=["GET"])
def get_entry(entry_id):
    entry = entry_service.get_entry(current_user_id(), entry_id)
    return jsonify(entry.to_dict()), 200


@entry_bp.route("/<entry_id>", methods=["PUT"])
def update_entry(entry_id):
    """Body: { "title"?, "kind"?, "occurred_at"?, "raw_content"?, "is_decision"? }"""
    data = request.get_json(silent=True) or {}
    entry = entry_service.update_entry(current_user_id(), entry_id, data)
    return jsonify(entry.to_dict()), 200


@entry_bp.route("/<entry_id>", methods=["DELETE"])
def delete_entry(entry_id):
    entry_service.delete_entry(current_user_id(), entry_id)
    return jsonify({"message": "Entry deleted"}), 200


@entry_bp.route("/<entry_id>/decision", methods=["POST"])
def mark_decision(entry_id):
    """Body: { "is_decision"?: bool (default true) }"""
    data = request.get_json(silent=True) or {}
    entry = entry_service.mark_as_decision(
        current_user_id(), entry_id, data.get("is_decision", True) is not False,
    )
    return jsonify(entry.to_dict()), 200


@entry_bp.route("/<entry_id>/summarize", methods=["POST"])
def summarize_entry(entry_id):
    """AI summary + suggested actions.

    Returns: { entry_id, summary, key_decisions, open_questions, suggested_actions }
    """
    result = EntrySummarizer(get_gateway()).summarize(current_user_id(), entry_id)
    return jsonify(result), 200


@entry_bp.route("/<entry_id>/commitments", methods=["POST"])
def accept_suggestions(entry_id):
    """Create commitments from the suggestions the user kept.

    Body: { "project_id"?: str, "actions": [ {title, direction, counterparty?,
            due_date?, notes?, importance?, urgency?}, ... ] }
    Returns: { "items": [...], "total": int } (201)
    """
    data = request.get_json(silent=True) or {}
    created = create_commitments_from_suggestions(
        current_user_id(), entry_id, data.get("actions"), project_id=data.get("project_id"),
    )
    return jsonify({"items": [c.to_dict() for c in created], "total": len(created)}), 201
