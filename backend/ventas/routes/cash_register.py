# Overview: Flask API routes for the cash register screen; open, move, close and history.

"""
Cash register routes

SECURITY: All routes require manage_cash_register.
Moving, closing or reading someone else's register additionally requires
the manager role; otherwise the request is denied and audited.
"""

from flask import Blueprint, jsonify, request, g
from sqlalchemy.exc import SQLAlchemyError

from ..access import role_satisfies
from ..decorators import deny, require_auth, require_permission
from ..services import register_service
from .common import degraded, error_response, json_body


cash_register_bp = Blueprint("cash_register", __name__, url_prefix="/api/cash-register")


def _manager_override() -> bool:
    return role_satisfies(g.current_user.role, "manager")


def _deny_register(register_id: int, e: register_service.RegisterAccessError):
    return deny(f"cash_register:{register_id}", str(e))


@cash_register_bp.get("/current")
@require_auth
@require_permission("manage_cash_register")
def current_register_route():
    """The signed-in user's open register with its summary, or null."""
    register = register_service.get_open_register(g.current_user.id)
    if register is None:
        return jsonify({"register": None}), 200
    return jsonify(register_service.get_register_summary(register.id)), 200


@cash_register_bp.get("/categories")
@require_auth
@require_permission("manage_cash_register")
def movement_categories_route():
    return jsonify({
        "income": register_service.INCOME_CATEGORIES,
        "expense": register_service.EXPENSE_CATEGORIES,
    }), 200


@cash_register_bp.post("/open")
@require_auth
@require_permission("manage_cash_register")
def open_register_route():
    try:
        data = json_body()
        register = register_service.open_register(
            g.current_user.id,
            data.get("opening_amount", 0),
            notes=data.get("notes"),
        )
    except ValueError as e:
        return error_response(e)
    return jsonify(register.to_dict()), 201


@cash_register_bp.post("/<int:register_id>/movements")
@require_auth
@require_permission("manage_cash_register")
def add_movement_route(register_id: int):
    """
    Record a manual income or expense.

    Body: {type: income|expense, amount, description, category?}
    """
    try:
        data = json_body()
        movement = register_service.add_movement(
            register_id,
            g.current_user.id,
            data.get("type"),
            data.get("amount"),
            data.get("description"),
            category=data.get("category"),
            manager_override=_manager_override(),
        )
    except register_service.RegisterAccessError as e:
        return _deny_register(register_id, e)
    except ValueError as e:
        return error_response(e)
    return jsonify(movement.to_dict()), 201


@cash_register_bp.post("/<int:register_id>/close")
@require_auth
@require_permission("manage_cash_register")
def close_register_route(register_id: int):
    """
    Close a register with the counted cash.

    Body: {actual_amount, discrepancy_reason?, notes?}
    """
    try:
        data = json_body()
        register = register_service.close_register(
            register_id,
            data.get("actual_amount"),
            data.get("discrepancy_reason"),
            data.get("notes"),
            current_user_id=g.current_user.id,
            manager_override=_manager_override(),
        )
    except register_service.RegisterAccessError as e:
        return _deny_register(register_id, e)
    except ValueError as e:
        return error_response(e)
    return jsonify(register.to_dict()), 200


@cash_register_bp.get("/<int:register_id>")
@require_auth
@require_permission("manage_cash_register")
def register_summary_route(register_id: int):
    try:
        summary = register_service.get_register_summary(
            register_id,
            current_user_id=g.current_user.id,
            manager_override=_manager_override(),
        )
    except register_service.RegisterAccessError as e:
        return _deny_register(register_id, e)
    except ValueError as e:
        return error_response(e)
    return jsonify(summary), 200


@cash_register_bp.get("/history")
@require_auth
@require_permission("manage_cash_register")
def history_route():
    """Closed registers, newest first. Non-managers only see their own."""
    user_id = None if _manager_override() else g.current_user.id
    try:
        registers = register_service.list_closed_registers(
            user_id=user_id,
            limit=max(1, min(request.args.get("limit", 50, type=int), 200)),
        )
    except SQLAlchemyError:
        return degraded("items", [])
    return jsonify({"items": [r.to_dict() for r in registers], "degraded": False}), 200
