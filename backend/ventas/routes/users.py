# Overview: Employee administration routes; accounts, role permissions and the security log.

"""
User administration routes

SECURITY:
- Reading employees requires view_users or manage_users
- Creating, editing and deactivating employees requires manage_users
- Changing role permission sets requires manage_users and the admin role
- The security event log requires view_audit
"""

from flask import Blueprint, jsonify, request, g
from sqlalchemy.exc import SQLAlchemyError

from ..decorators import require_auth, require_any_permission, require_permission, require_role
from ..extensions import db
from ..models import SecurityEvent
from ..permissions import ROLE_LABELS, ROLE_ORDER
from ..services import auth_service, permission_service, session_service
from .common import degraded, error_response, json_body


users_bp = Blueprint("users", __name__, url_prefix="/api/users")
roles_bp = Blueprint("roles", __name__, url_prefix="/api/roles")
audit_bp = Blueprint("audit", __name__, url_prefix="/api/audit")


def _log_admin_event(event_type: str, user_id: int, action: str, reason: str | None = None) -> None:
    permission_service.log_security_event(
        user_id=g.current_user.id,
        event_type=event_type,
        success=True,
        resource=f"/api/users/{user_id}",
        action=action,
        reason=reason,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )


# -- Employees --

@users_bp.get("")
@require_auth
@require_any_permission("view_users", "manage_users")
def list_users_route():
    """?include_inactive=false hides deactivated accounts."""
    include_inactive = request.args.get("include_inactive", "true").lower() not in {"0", "false", "no"}
    try:
        users = auth_service.list_users(include_inactive=include_inactive)
    except SQLAlchemyError:
        return degraded("items", [])
    return jsonify({"items": [u.to_dict() for u in users], "degraded": False}), 200


@users_bp.get("/<int:user_id>")
@require_auth
@require_any_permission("view_users", "manage_users")
def get_user_route(user_id: int):
    try:
        user = auth_service.get_user(user_id)
    except ValueError as e:
        return error_response(e)
    return jsonify({
        "user": user.to_dict(),
        "permissions": permission_service.get_user_permissions(user.id),
    }), 200


@users_bp.post("")
@require_auth
@require_permission("manage_users")
def create_user_route():
    """
    Create an employee account.

    Body: {name, email, password, role?, is_active?}
    """
    try:
        data = json_body()
        user = auth_service.create_user(
            data.get("name"),
            data.get("email"),
            data.get("password") or "",
            role=data.get("role") or "employee",
            is_active=data.get("is_active", True),
        )
    except ValueError as e:
        return error_response(e)

    _log_admin_event("USER_CREATED", user.id, f"Created user: {user.email}")
    return jsonify(user.to_dict()), 201


@users_bp.patch("/<int:user_id>")
@require_auth
@require_permission("manage_users")
def update_user_route(user_id: int):
    """
    Update name, email, role or active flag.

    Deactivation revokes every session of the employee. An administrator
    cannot deactivate their own account.
    """
    try:
        data = json_body()
        unknown = sorted(set(data) - {"name", "email", "role", "is_active"})
        if unknown:
            return jsonify({"error": f"Field not allowed: {', '.join(unknown)}"}), 400

        if user_id == g.current_user.id and data.get("is_active") is False:
            return jsonify({"error": "No puedes desactivar tu propia cuenta"}), 400

        user = auth_service.update_user(
            user_id,
            name=data.get("name"),
            email=data.get("email"),
            role=data.get("role"),
            is_active=data.get("is_active"),
        )
    except ValueError as e:
        return error_response(e)

    if data.get("is_active") is False:
        _log_admin_event("USER_DEACTIVATED", user.id, f"Deactivated user: {user.email}")
    return jsonify(user.to_dict()), 200


@users_bp.post("/<int:user_id>/reset-password")
@require_auth
@require_permission("manage_users")
def reset_password_route(user_id: int):
    """Set a new password for an employee; all their sessions are revoked."""
    try:
        data = json_body()
        user = auth_service.change_password(user_id, data.get("password") or "")
    except ValueError as e:
        return error_response(e)

    _log_admin_event("PASSWORD_RESET", user.id, f"Reset password: {user.email}")
    return jsonify({"message": "Contraseña actualizada"}), 200


@users_bp.post("/<int:user_id>/revoke-sessions")
@require_auth
@require_permission("manage_users")
def revoke_sessions_route(user_id: int):
    try:
        user = auth_service.get_user(user_id)
    except ValueError as e:
        return error_response(e)

    count = session_service.revoke_all_user_sessions(user.id, reason="Revoked by administrator")
    _log_admin_event("SESSIONS_REVOKED", user.id, f"Revoked sessions: {user.email}", f"{count} sessions")
    return jsonify({"sessions_revoked": count}), 200


# -- Roles --

@roles_bp.get("")
@require_auth
@require_any_permission("view_users", "manage_users")
def list_roles_route():
    """Role tags in rank order with their granted permission names."""
    roles = []
    for role in ROLE_ORDER:
        roles.append({
            "role": role,
            "label": ROLE_LABELS.get(role, role),
            "permissions": sorted(p.name for p in permission_service.get_role_permissions(role)),
        })
    return jsonify({
        "roles": roles,
        "all_permissions": [p.to_dict() for p in permission_service.list_permissions()],
    }), 200


@roles_bp.post("/<role>/permissions")
@require_auth
@require_permission("manage_users")
@require_role("admin")
def grant_role_permission_route(role: str):
    """Body: {permission_name}"""
    try:
        data = json_body()
        permission_service.grant_permission_to_role(role, data.get("permission_name") or "")
    except ValueError as e:
        return jsonify({"error": str(e)}), 404

    _log_admin_event("PERMISSION_GRANTED", g.current_user.id, f"{role} += {data.get('permission_name')}")
    return jsonify({"ok": True}), 200


@roles_bp.delete("/<role>/permissions/<permission_name>")
@require_auth
@require_permission("manage_users")
@require_role("admin")
def revoke_role_permission_route(role: str, permission_name: str):
    try:
        removed = permission_service.revoke_permission_from_role(role, permission_name)
    except ValueError as e:
        return jsonify({"error": str(e)}), 404

    if removed:
        _log_admin_event("PERMISSION_REVOKED", g.current_user.id, f"{role} -= {permission_name}")
    return jsonify({"ok": True, "removed": removed}), 200


# -- Audit --

@audit_bp.get("/events")
@require_auth
@require_permission("view_audit")
def list_security_events_route():
    """
    Security event log, newest first.

    Query params: event_type, user_id, limit (default 100, max 500)
    """
    limit = max(1, min(request.args.get("limit", 100, type=int), 500))
    try:
        query = db.session.query(SecurityEvent)
        event_type = request.args.get("event_type")
        if event_type:
            query = query.filter(SecurityEvent.event_type == event_type)
        user_id = request.args.get("user_id", type=int)
        if user_id is not None:
            query = query.filter(SecurityEvent.user_id == user_id)
        events = query.order_by(SecurityEvent.id.desc()).limit(limit).all()
    except SQLAlchemyError:
        return degraded("items", [])

    return jsonify({"items": [e.to_dict() for e in events], "degraded": False}), 200
