"""
Export Blueprint.

Endpoints:
    GET /api/v1/export  all projects, entries, commitments and reflections of the caller
"""

from flask import Blueprint, jsonify

from leaderdojo.middleware.user_context import current_user_id
from leaderdojo.services import export_service

export_bp = Blueprint("export", __name__, url_prefix="/api/v1/export")


@export_bp.route("", methods=["GET"])
def export_data():
    return jsonify(export_service.export_user_data(current_user_id())), 200
