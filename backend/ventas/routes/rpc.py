# Overview: Remote procedures used by the client auth gateway; JSON in, {"data": ...} out.

"""
Remote procedures

POST /rpc/<name> with a JSON object of named arguments.
Every successful call answers 200 {"data": <result>}; "no such user" and
"invalid session" are results (data null), not errors.

PROCEDURES:
- authenticate(email, password) -> session record or null
- validate_session(token) -> user record or null
- logout(token) -> null
- get_permissions(user_id) -> [{permission_name, description, module}]
  (needs the caller's own bearer token; a session may only read its own user)
"""

from flask import Blueprint, current_app, jsonify, request

from ..access import ACCESS_DENIED
from ..decorators import bearer_token
from ..services import login_service, permission_service, session_service
from ..validation import ValidationError, coerce_int
from .common import json_body


rpc_bp = Blueprint("rpc", __name__, url_prefix="/rpc")


def _client():
    return {
        "ip_address": request.remote_addr,
        "user_agent": request.headers.get("User-Agent"),
    }


def _string_arg(args: dict, name: str) -> str:
    value = args.get(name)
    if not isinstance(value, str):
        raise ValidationError(f"{name} is required")
    return value


def authenticate(args: dict):
    email = _string_arg(args, "email")
    password = _string_arg(args, "password")

    result = login_service.sign_in(email, password, **_client())
    if not result:
        return None
    user, token = result
    return login_service.session_record(user, token)


def validate_session(args: dict):
    context = session_service.validate_session(_string_arg(args, "token"))
    if not context:
        return None
    return login_service.session_record(context.user)


def logout(args: dict):
    login_service.sign_out(_string_arg(args, "token"), **_client())
    return None


def get_permissions(args: dict):
    user_id = coerce_int("user_id", args.get("user_id"))

    token = bearer_token() or args.get("token")
    context = session_service.validate_session(token) if isinstance(token, str) else None
    if not context:
        raise PermissionError("Invalid or expired token")
    if context.user.id != user_id:
        raise PermissionError("Session does not belong to user")

    return permission_service.get_user_permissions(user_id)


PROCEDURES = {
    "authenticate": authenticate,
    "validate_session": validate_session,
    "logout": logout,
    "get_permissions": get_permissions,
}


@rpc_bp.post("/<name>")
def call_procedure(name: str):
    procedure = PROCEDURES.get(name)
    if procedure is None:
        return jsonify({"error": f"Unknown procedure: {name}"}), 404

    try:
        args = json_body()
        data = procedure(args)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PermissionError as e:
        current_app.logger.info("Rejected %s call: %s", name, e)
        return jsonify(ACCESS_DENIED.to_dict()), 403

    return jsonify({"data": data}), 200
