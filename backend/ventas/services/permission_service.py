# Overview: Service-layer operations for permissions; role grants, lookups and security event logging.

"""
Permission Lookup and Security Event Logging

WHY: Every screen is gated by a named permission. The permissions a user
holds are the ones granted to their role tag in role_permissions, seeded
from DEFAULT_ROLE_PERMISSIONS and editable afterwards.

DESIGN PRINCIPLES:
- Fail closed: no grant means no access, unknown roles hold nothing
- Log denials only: permission grants are not logged
- Fresh on every sign-in: the client reloads the list after authenticating
"""

from ..extensions import db
from ..models import User, RolePermission, Permission, SecurityEvent
from ..permissions import PERMISSION_DEFINITIONS, DEFAULT_ROLE_PERMISSIONS, validate_role
from ventas.time_utils import utcnow


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SecurityEvent:
    """
    Log security event to audit trail.

    event_type examples:
    - PERMISSION_DENIED
    - LOGIN_FAILED
    - LOGIN_SUCCESS
    - LOGOUT
    - USER_CREATED
    - PASSWORD_CHANGED
    """
    event = SecurityEvent(
        user_id=user_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:512] or None,
        occurred_at=utcnow()
    )

    db.session.add(event)
    db.session.commit()

    return event


def get_role_permissions(role: str | None) -> list[Permission]:
    """Permission rows granted to a role tag, ordered by module then name."""
    if not role:
        return []
    return (
        db.session.query(Permission)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .filter(RolePermission.role == role)
        .order_by(Permission.module, Permission.name)
        .all()
    )


def get_user_permissions(user_id: int) -> list[dict]:
    """
    Permission records for a user, as returned by the get_permissions procedure.

    Returns [{permission_name, description, module}, ...]; empty for unknown
    or inactive users.
    """
    user = db.session.get(User, user_id)
    if not user or not user.is_active:
        return []
    return [permission.to_dict() for permission in get_role_permissions(user.role)]


def get_user_permission_names(user_id: int) -> set[str]:
    return {record["permission_name"] for record in get_user_permissions(user_id)}


def user_has_permission(user_id: int, permission_name: str) -> bool:
    return permission_name in get_user_permission_names(user_id)


def list_permissions() -> list[Permission]:
    return db.session.query(Permission).order_by(Permission.module, Permission.name).all()


def initialize_permissions() -> int:
    """
    Initialize all permission definitions in database.

    Creates Permission records for all names in PERMISSION_DEFINITIONS.
    Idempotent: Safe to run multiple times. Descriptions are refreshed.
    """
    created_count = 0

    for name, description, module in PERMISSION_DEFINITIONS:
        existing = db.session.query(Permission).filter_by(name=name).first()

        if existing:
            existing.description = description
            existing.module = module
            continue

        db.session.add(Permission(name=name, description=description, module=module))
        created_count += 1

    db.session.commit()
    return created_count


def assign_default_role_permissions() -> int:
    """
    Grant DEFAULT_ROLE_PERMISSIONS to every role tag.

    Idempotent: existing grants are skipped, extra grants are left alone.
    """
    created_count = 0

    for role, permission_names in DEFAULT_ROLE_PERMISSIONS.items():
        for permission_name in permission_names:
            permission = db.session.query(Permission).filter_by(name=permission_name).first()
            if not permission:
                continue  # initialize_permissions() not run yet

            existing = db.session.query(RolePermission).filter_by(
                role=role,
                permission_id=permission.id
            ).first()

            if not existing:
                db.session.add(RolePermission(role=role, permission_id=permission.id))
                created_count += 1

    db.session.commit()
    return created_count


def _lookup(role: str, permission_name: str) -> Permission:
    if not validate_role(role):
        raise ValueError(f"Role '{role}' not found")

    permission = db.session.query(Permission).filter_by(name=permission_name).first()
    if not permission:
        raise ValueError(f"Permission '{permission_name}' not found")
    return permission


def grant_permission_to_role(role: str, permission_name: str) -> RolePermission:
    """Grant a permission to a role tag."""
    permission = _lookup(role, permission_name)

    existing = db.session.query(RolePermission).filter_by(
        role=role,
        permission_id=permission.id
    ).first()
    if existing:
        return existing

    role_permission = RolePermission(role=role, permission_id=permission.id)
    db.session.add(role_permission)
    db.session.commit()

    return role_permission


def revoke_permission_from_role(role: str, permission_name: str) -> bool:
    """Revoke a permission from a role tag. Returns False if it wasn't granted."""
    permission = _lookup(role, permission_name)

    role_permission = db.session.query(RolePermission).filter_by(
        role=role,
        permission_id=permission.id
    ).first()

    if not role_permission:
        return False

    db.session.delete(role_permission)
    db.session.commit()
    return True
