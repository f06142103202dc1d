# Overview: Dashboard statistics route; falls back to default stats when the database fails.

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from ..decorators import require_auth, require_permission
from ..services import dashboard_service
from .common import degraded


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("")
@require_auth
@require_permission("view_dashboard")
def dashboard_route():
    try:
        stats = dashboard_service.get_dashboard_stats(
            low_stock_threshold=current_app.config.get("LOW_STOCK_THRESHOLD", 5)
        )
    except SQLAlchemyError:
        return degraded("stats", dashboard_service.default_stats())

    return jsonify({"stats": stats, "degraded": False}), 200
