"""
Project Blueprint.

Endpoints:
  Project:     GET/POST /projects
               GET/PUT  /projects/<project_id>
  Timeline:    GET      /projects/<project_id>/entries
  Prep:        GET      /projects/<project_id>/prep

All routes are scoped to the calling user (g.user_id).
"""

import logging

from flask import Blueprint, jsonify, request

from leaderdojo.ai import get_gateway
from leaderdojo.blueprints import arg_list, limit_arg
from leaderdojo.middleware.user_context import current_user_id
from leaderdojo.services import entry_service, project_service
from leaderdojo.services.prep_service import PrepBriefingGenerator
from leaderdojo.utils.errors import E, api_error

logger = logging.getLogger(__name__)

project_bp = Blueprint("project", __name__, url_prefix="/api/v1/projects")


@project_bp.route("", methods=["GET"])
def list_projects():
    """List projects, most recently active first.

    Query params: status? (comma list), type? (comma list), min_priority?
    Returns: { "items": [...], "total": int }
    """
    items = project_service.list_projects(
        current_user_id(),
        statuses=arg_list("status"),
        types=arg_list("type"),
        min_priority=request.args.get("min_priority", type=int),
    )
    return jsonify({"items": [p.to_dict() for p in items], "total": len(items)}), 200


@project_bp.route("", methods=["POST"])
def create_project():
    """Body: { "name": str, "description"?, "type"?, "status"?, "priority"?, "owner_notes"? }"""
    data = request.get_json(silent=True) or {}
    project = project_service.create_project(current_user_id(), data)
    return jsonify(project.to_dict()), 201


@project_bp.route("/<project_id>", methods=["GET"])
def get_project(project_id):
    project = project_service.get_project(current_user_id(), project_id)
    return jsonify(project.to_dict()), 200


@project_bp.route("/<project_id>", methods=["PUT"])
def update_project(project_id):
    data = request.get_json(silent=True) or {}
    project = project_service.update_project(current_user_id(), project_id, data)
    return jsonify(project.to_dict()), 200


@project_bp.route("/<project_id>/entries", methods=["GET"])
def project_timeline(project_id):
    """Project timeline. Query params: kind? (comma list), limit?"""
    items = entry_service.list_timeline(
        current_user_id(), project_id, kinds=arg_list("kind"), limit=limit_arg(),
    )
    return jsonify({"items": [e.to_dict() for e in items], "total": len(items)}), 200


@project_bp.route("/<project_id>/prep", methods=["GET"])
def project_prep(project_id):
    """AI prep briefing from recent entries and open commitments (read-only)."""
    briefing = PrepBriefingGenerator(get_gateway()).generate_briefing(current_user_id(), project_id)
    if briefing is None:
        return api_error(E.NOT_FOUND, "Project not found")
    return jsonify(briefing), 200
