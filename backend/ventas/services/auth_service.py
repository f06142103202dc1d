# Overview: Service-layer operations for employee accounts; password hashing and credential checks.

"""
Employee Authentication Service

WHY: Every sale, abono and register movement is attributed to an employee.
Uses bcrypt for password hashing and enforces a minimum password strength.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost from BCRYPT_ROUNDS, 12 by default)
- Minimum 6 characters with at least one uppercase, lowercase and digit
- Emails are compared lower-case
- Inactive employees never authenticate
- Session tokens managed separately (see session_service.py)
"""

import re

import bcrypt
from flask import current_app

from ..extensions import db
from . import session_service
from ..models import User
from ..permissions import validate_role
from ..validation import ConflictError, NotFoundError, ValidationError
from ventas.time_utils import utcnow


MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2
DEFAULT_BCRYPT_ROUNDS = 12

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 6 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if not password:
        raise PasswordValidationError("La contraseña es requerida")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError("La contraseña debe tener al menos 6 caracteres")

    if not (re.search(r'[A-Z]', password) and re.search(r'[a-z]', password) and re.search(r'\d', password)):
        raise PasswordValidationError(
            "La contraseña debe contener al menos una mayúscula, una minúscula y un número"
        )


def _bcrypt_rounds() -> int:
    try:
        return int(current_app.config.get("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS))
    except RuntimeError:
        return DEFAULT_BCRYPT_ROUNDS


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=_bcrypt_rounds())
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    A malformed stored hash counts as a mismatch.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _validate_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("El nombre es requerido")
    if len(name) < MIN_NAME_LENGTH:
        raise ValidationError("El nombre debe tener al menos 2 caracteres")
    return name


def _validate_email(email: str | None, exclude_user_id: int | None = None) -> str:
    email = normalize_email(email)
    if not email:
        raise ValidationError("El email es requerido")
    if not _EMAIL_RE.match(email):
        raise ValidationError("El email no tiene un formato válido")

    query = db.session.query(User).filter(User.email == email)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    if query.first():
        raise ConflictError("Ya existe un usuario con este email")
    return email


def _validate_role(role: str) -> str:
    if not validate_role(role):
        raise ValidationError(f"Rol inválido: {role}")
    return role


def create_user(
    name: str,
    email: str,
    password: str,
    role: str = "employee",
    is_active: bool = True,
) -> User:
    """
    Create new employee with bcrypt password hashing.

    Raises:
        ValidationError: invalid name, email or role
        PasswordValidationError: password doesn't meet requirements
        ConflictError: email already registered
    """
    user = User(
        name=_validate_name(name),
        email=_validate_email(email),
        password_hash=hash_password(password),
        role=_validate_role(role),
        is_active=bool(is_active),
        created_at=utcnow(),
    )

    db.session.add(user)
    db.session.commit()

    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate an employee by email and password.

    Returns the User if credentials are valid and the account is active,
    None otherwise. Callers never learn which of the checks failed.
    """
    email = normalize_email(email)
    if not email or not password:
        return None

    user = db.session.query(User).filter_by(email=email).first()
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    if not user.is_active:
        return None

    user.last_login_at = utcnow()
    db.session.commit()

    return user


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("Usuario no encontrado")
    return user


def list_users(include_inactive: bool = True) -> list[User]:
    query = db.session.query(User)
    if not include_inactive:
        query = query.filter(User.is_active.is_(True))
    return query.order_by(User.name).all()


def update_user(
    user_id: int,
    *,
    name: str | None = None,
    email: str | None = None,
    role: str | None = None,
    is_active: bool | None = None,
) -> User:
    """
    Update profile fields of an employee.

    Deactivating an employee revokes every open session of theirs.
    """
    user = get_user(user_id)

    if name is not None:
        user.name = _validate_name(name)
    if email is not None and normalize_email(email) != user.email:
        user.email = _validate_email(email, exclude_user_id=user.id)
    if role is not None:
        user.role = _validate_role(role)

    deactivated = False
    if is_active is not None:
        if not isinstance(is_active, bool):
            raise ValidationError("is_active must be a boolean")
        deactivated = user.is_active and not is_active
        user.is_active = is_active

    db.session.commit()

    if deactivated:
        session_service.revoke_all_user_sessions(user.id, reason="User account deactivated")

    return user


def change_password(user_id: int, new_password: str) -> User:
    """
    Replace an employee's password.

    All existing sessions are revoked so the new password takes effect everywhere.
    """
    user = get_user(user_id)
    user.password_hash = hash_password(new_password)
    db.session.commit()

    session_service.revoke_all_user_sessions(user.id, reason="Password changed")
    return user
