"""
Dashboard Blueprint.

Endpoints:
    GET /api/v1/dashboard  weekly focus, idle projects, pending reviews, stats
"""

from flask import Blueprint, jsonify

from leaderdojo.middleware.user_context import current_user_id
from leaderdojo.services import dashboard_service

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/v1/dashboard")


@dashboard_bp.route("", methods=["GET"])
def get_dashboard():
    return jsonify(dashboard_service.get_dashboard(current_user_id())), 200
