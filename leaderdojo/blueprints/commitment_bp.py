"""
Commitment Blueprint.

Endpoints:
  Commitment:  GET/POST  /commitments
               GET/PUT   /commitments/<commitment_id>
  Status:      PATCH     /commitments/<commitment_id>/status
"""

import logging

from flask import Blueprint, jsonify, request

from leaderdojo.blueprints import arg_list
from leaderdojo.middleware.user_context import current_user_id
from leaderdojo.services import commitment_service

logger = logging.getLogger(__name__)

commitment_bp = Blueprint("commitment", __name__, url_prefix="/api/v1/commitments")


@commitment_bp.route("", methods=["GET"])
def list_commitments():
    """Query params: project_id?, direction? (comma list), status? (comma list),
    due_after?, due_before?
    """
    items = commitment_service.list_commitments(
        current_user_id(),
        project_id=request.args.get("project_id"),
        directions=arg_list("direction"),
        statuses=arg_list("status"),
        due_after=request.args.get("due_after"),
        due_before=request.args.get("due_before"),
    )
    return jsonify({"items": [c.to_dict() for c in items], "total": len(items)}), 200


@commitment_bp.route("", methods=["POST"])
def create_commitment():
    """Manual commitment. Body: { project_id, title, direction?, entry_id?, ... }"""
    data = request.get_json(silent=True) or {}
    commitment = commitment_service.create_commitment(current_user_id(), data)
    return jsonify(commitment.to_dict()), 201


@commitment_bp.route("/<commitment_id>", methods=["GET"])
def get_commitment(commitment_id):
    commitment = commitment_service.get_commitment(current_user_id(), commitment_id)
    return jsonify(commitment.to_dict()), 200


@commitment_bp.route("/<commitment_id>", methods=["PUT"])
def update_commitment(commitment_id):
    data = request.get_json(silent=True) or {}
    commitment = commitment_service.update_commitment(current_user_id(), commitment_id, data)
    return jsonify(commitment.to_dict()), 200


@commitment_bp.route("/<commitment_id>/status", methods=["PATCH"])
def update_status(commitment_id):
    """Body: { "status": "open" | "done" | "blocked" | "dropped" }"""
    data = request.get_json(silent=True) or {}
    commitment = commitment_service.update_status(current_user_id(), commitment_id, data.get("status"))
    return jsonify(commitment.to_dict()), 200
