# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

SECURITY FEATURES:
- One generic error for every sign-in failure
- Session management with token-based auth
- Self-service password change revokes every session of the user
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import bearer_token, require_auth
from ..services import auth_service, login_service, permission_service, session_service
from ..services.auth_service import PasswordValidationError
from .common import json_body


INVALID_CREDENTIALS = "Credenciales inválidas"

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    """
    Self-registration is disabled.

    Employees are created by administrators via POST /api/users or the CLI.
    """
    return jsonify({
        "error": "El registro está deshabilitado. Solicita una cuenta a un administrador."
    }), 403


@auth_bp.post("/login")
def login_route():
    """
    Authenticate an employee and create a session token.

    Returns user info, permissions and the token on success.
    Token must be included in Authorization header for protected routes.
    """
    try:
        data = json_body()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    email = data.get("email")
    password = data.get("password")

    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return jsonify({"error": "Email y contraseña son requeridos"}), 400

    result = login_service.sign_in(
        email,
        password,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )
    if not result:
        return jsonify({"error": INVALID_CREDENTIALS}), 401

    user, token = result
    return jsonify({
        "user": user.to_dict(),
        "permissions": permission_service.get_user_permissions(user.id),
        "token": token,
        "message": "Sesión iniciada",
    }), 200


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke session token (logout).

    Expects Authorization header: Bearer <token>
    An unknown or already revoked token still answers 200.
    """
    token = bearer_token()
    if not token:
        return jsonify({"error": "Authorization header required"}), 401

    login_service.sign_out(
        token,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )
    return jsonify({"message": "Sesión cerrada"}), 200


@auth_bp.post("/validate")
def validate_route():
    """
    Validate session token and return the user with permissions.

    WHY: Frontend restores its session on reload and filters navigation
    with the returned permission list.
    """
    token = bearer_token()
    if not token:
        return jsonify({"error": "Authorization header required"}), 401

    context = session_service.validate_session(token)
    if not context:
        return jsonify({"error": "Invalid or expired token"}), 401

    return jsonify({
        "user": context.user.to_dict(),
        "permissions": permission_service.get_user_permissions(context.user.id),
        "session": context.session.to_dict(),
    }), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({
        "user": g.current_user.to_dict(),
        "permissions": sorted(g.auth_state.directory.names),
    }), 200


@auth_bp.post("/change-password")
@require_auth
def change_password_route():
    """
    Change the signed-in employee's password.

    Requires the current password. All sessions, including this one, are
    revoked; the client signs in again with the new password.
    """
    try:
        data = json_body()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    current_password = data.get("current_password") or ""
    new_password = data.get("new_password") or ""

    if not auth_service.verify_password(current_password, g.current_user.password_hash):
        return jsonify({"error": "La contraseña actual no es correcta"}), 400

    try:
        auth_service.change_password(g.current_user.id, new_password)
    except PasswordValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"message": "Contraseña actualizada"}), 200
