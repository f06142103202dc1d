# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .access import ACCESS_DENIED, AccessGuard, AuthState, SessionUser
from .services import session_service, permission_service


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user') and hasattr(g, 'access_guard')


def deny(action: str, reason: str):
    """Log the denial and answer with the fixed placeholder."""
    user = g.current_user
    permission_service.log_security_event(
        user_id=user.id,
        event_type="PERMISSION_DENIED",
        success=False,
        resource=request.path,
        action=action,
        reason=reason,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )
    return jsonify(ACCESS_DENIED.to_dict()), 403


def require_auth(f):
    """
    Require a valid employee session.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.session_context: The full SessionContext object
    - g.session_token: The bearer token as sent
    - g.auth_state: AuthState with the user's permission directory loaded
    - g.access_guard: AccessGuard over g.auth_state

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid, expired, idle or revoked token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        context = session_service.validate_session(token)
        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        user = context.user
        state = AuthState(user=SessionUser.from_model(user))
        state.set_permissions(permission_service.get_user_permissions(user.id))

        g.current_user = user
        g.session_context = context
        g.session_token = token
        g.auth_state = state
        g.access_guard = AccessGuard(state)

        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_name: str):
    """Require a specific permission. Must be stacked under @require_auth."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            if not g.access_guard.has_permission(permission_name):
                return deny(permission_name, f"Missing permission: {permission_name}")

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_any_permission(*permission_names):
    """Require any of the specified permissions."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            if not g.access_guard.has_any_permission(permission_names):
                return deny(
                    ",".join(permission_names),
                    f"Missing any of permissions: {', '.join(permission_names)}",
                )

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_all_permissions(*permission_names):
    """Require every one of the specified permissions."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            missing = g.access_guard.missing_permissions(permission_names)
            if missing or not permission_names:
                return deny(
                    ",".join(permission_names),
                    f"Missing permissions: {', '.join(missing)}",
                )

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_role(role: str):
    """Require the user's role to rank at or above role (admin > manager > employee > cashier)."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            if not g.access_guard.has_role(role):
                return deny(f"role:{role}", f"Role {g.current_user.role} below {role}")

            return f(*args, **kwargs)

        return decorated_function
    return decorator
