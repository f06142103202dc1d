# Overview: Sign-in and sign-out flows shared by the remote procedures and the REST auth routes.

"""
Employee Sign-in

WHY: The remote procedures (/rpc/authenticate, /rpc/logout) and the REST
routes (/api/auth/login, /api/auth/logout) must behave identically, so the
flow lives here once.

SECURITY:
- Failures never say whether the email exists, the password was wrong or
  the account is inactive
- Every failure is written to security_events as LOGIN_FAILED
- Logout of an unknown or already revoked token is not an error
"""

from . import auth_service, permission_service, session_service


def session_record(user, token: str | None = None) -> dict:
    """User fields in the shape the remote procedures return."""
    record = {
        "user_id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "is_active": bool(user.is_active),
    }
    if token is not None:
        record = {"session_token": token, **record}
    return record


def sign_in(
    email: str,
    password: str,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> tuple[object, str] | None:
    """
    Authenticate and open a session.

    Returns (user, plaintext_token) or None on any failure.
    """
    user = auth_service.authenticate(email, password)

    if not user:
        permission_service.log_security_event(
            user_id=None,
            event_type="LOGIN_FAILED",
            success=False,
            resource="authenticate",
            action=auth_service.normalize_email(email)[:64] or None,
            reason="Invalid credentials",
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return None

    _session, token = session_service.create_session(
        user_id=user.id,
        user_agent=user_agent,
        ip_address=ip_address,
    )
    permission_service.log_security_event(
        user_id=user.id,
        event_type="LOGIN_SUCCESS",
        success=True,
        resource="authenticate",
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return user, token


def sign_out(
    token: str | None,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> bool:
    """Revoke the session behind token. Returns False if there was nothing to revoke."""
    if not token:
        return False

    context = session_service.validate_session(token)
    revoked = session_service.revoke_session(token, reason="User logout")
    if revoked and context:
        permission_service.log_security_event(
            user_id=context.user.id,
            event_type="LOGOUT",
            success=True,
            resource="logout",
            ip_address=ip_address,
            user_agent=user_agent,
        )
    return revoked
