# Overview: Health endpoint; reports database and permission catalog status.

import time

from flask import Blueprint, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Permission, RolePermission, SessionToken, User
from ..time_utils import to_utc_z, utcnow


system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    start_time = time.time()
    try:
        user_count = db.session.query(User).count()
        active_sessions = db.session.query(SessionToken).filter_by(is_revoked=False).count()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"users": user_count, "active_sessions": active_sessions},
        }
    except SQLAlchemyError:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {"status": "unhealthy", "latency_ms": round(elapsed_ms, 2), "error": "Database error"}


def check_permissions_health() -> dict:
    """Degraded when the permission catalog has not been seeded."""
    try:
        permission_count = db.session.query(Permission).count()
        grant_count = db.session.query(RolePermission).count()
    except SQLAlchemyError:
        current_app.logger.exception("Permission health check failed")
        db.session.rollback()
        return {"status": "unhealthy", "error": "Permission catalog error"}

    details = {"permission_count": permission_count, "role_grants": grant_count}
    if permission_count == 0 or grant_count == 0:
        return {
            "status": "degraded",
            "warning": "Permissions not initialized; run `flask system init`",
            "details": details,
        }
    return {"status": "healthy", "details": details}


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: healthy or degraded
    - 503: database unreachable
    """
    checks = {
        "database": check_database_health(),
        "permissions": check_permissions_health(),
    }
    statuses = {check["status"] for check in checks.values()}
    if "unhealthy" in statuses:
        overall, http_status = "unhealthy", 503
    elif "degraded" in statuses:
        overall, http_status = "degraded", 200
    else:
        overall, http_status = "healthy", 200

    return {"status": overall, "timestamp": to_utc_z(utcnow()), "checks": checks}, http_status
