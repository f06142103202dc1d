# Overview: Service-layer operations for employee sessions; token issue, validation and revocation.

"""
Employee Session Token Service

WHY: Sign-in hands the client an opaque token that identifies the employee
for the rest of the shift. The client keeps it under the
employee_session_token key and sends it back on every call.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Absolute timeout (SESSION_DURATION_HOURS, one work shift by default)
- Idle timeout (SESSION_IDLE_TIMEOUT_MINUTES)
- Revocable on logout, deactivation or password change
- Tracks client IP and user agent for security monitoring
"""

import secrets
import hashlib
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, User
from ventas.time_utils import utcnow


# Fallbacks when called outside an application context
DEFAULT_SESSION_DURATION = timedelta(hours=8)
DEFAULT_IDLE_TIMEOUT = timedelta(hours=2)

# Revoked/expired sessions are kept this long for auditing
CLEANUP_RETENTION = timedelta(days=30)


@dataclass
class SessionContext:
    """Result of a successful validate_session."""
    user: User
    session: SessionToken


def _session_duration() -> timedelta:
    try:
        return timedelta(hours=current_app.config["SESSION_DURATION_HOURS"])
    except (RuntimeError, KeyError):
        return DEFAULT_SESSION_DURATION


def _idle_timeout() -> timedelta:
    try:
        return timedelta(minutes=current_app.config["SESSION_IDLE_TIMEOUT_MINUTES"])
    except (RuntimeError, KeyError):
        return DEFAULT_IDLE_TIMEOUT


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    WHY SHA-256 not bcrypt: Tokens are already high-entropy (unlike passwords).
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None
) -> tuple[SessionToken, str]:
    """
    Create new session token for an active user.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.

    Raises ValueError if the user does not exist or is inactive.
    """
    user = db.session.get(User, user_id)
    if not user:
        raise ValueError("User not found")
    if not user.is_active:
        raise ValueError("User account is inactive")

    plaintext_token = generate_token()

    now = utcnow()
    session = SessionToken(
        user_id=user_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _session_duration(),
        user_agent=(user_agent or "")[:512] or None,
        ip_address=ip_address,
        is_revoked=False
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def _revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason
    db.session.commit()


def validate_session(token: str | None) -> SessionContext | None:
    """
    Validate session token and return SessionContext if valid.

    Returns None if:
    - Token is missing, unknown, expired, idle or revoked
    - User account is deactivated (is_active=False)

    Updates last_used_at on successful validation (activity tracking).
    """
    if not token:
        return None

    now = utcnow()

    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False
    ).first()

    if not session:
        return None

    if session.expires_at < now:
        _revoke(session, "Expired")
        return None

    if now - session.last_used_at > _idle_timeout():
        _revoke(session, "Idle timeout")
        return None

    user = session.user

    # SECURITY: Deactivated employees lose their sessions immediately
    if not user or not user.is_active:
        _revoke(session, "User account deactivated")
        return None

    session.last_used_at = now
    db.session.commit()

    return SessionContext(user=user, session=session)


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """
    Revoke session token.

    Returns True if session was revoked, False if not found.
    """
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False
    ).first()

    if not session:
        return False

    _revoke(session, reason)
    return True


def revoke_all_user_sessions(user_id: int, reason: str = "Revoke all sessions") -> int:
    """
    Revoke all active sessions for a user.

    WHY: Password change or deactivation forces re-authentication everywhere.
    """
    now = utcnow()

    sessions = db.session.query(SessionToken).filter_by(
        user_id=user_id,
        is_revoked=False
    ).all()

    for session in sessions:
        session.is_revoked = True
        session.revoked_at = now
        session.revoked_reason = reason

    db.session.commit()
    return len(sessions)


def cleanup_expired_sessions() -> int:
    """
    Delete expired and revoked sessions older than the retention window.

    Returns count of sessions deleted. Run periodically (see `flask maintenance`).
    """
    now = utcnow()
    cutoff = now - CLEANUP_RETENTION

    deleted = db.session.query(SessionToken).filter(
        db.or_(
            SessionToken.expires_at < now,
            SessionToken.is_revoked.is_(True)
        ),
        SessionToken.created_at < cutoff
    ).delete(synchronize_session=False)

    db.session.commit()
    return deleted
