# Overview: Navigation menu for the signed-in employee, filtered by the access guard.

from flask import Blueprint, jsonify, g

from ..access import ACCESS_DENIED, get_menu_item, grouped_menu, visible_menu
from ..decorators import require_auth
from ..permissions import ROLE_LABELS


navigation_bp = Blueprint("navigation", __name__, url_prefix="/api/navigation")


@navigation_bp.get("")
@require_auth
def navigation_route():
    """
    Menu items the current user may open, in menu order.

    Items whose permission is absent from the user's directory are never
    included, not even disabled.
    """
    guard = g.access_guard
    user = g.auth_state.user
    return jsonify({
        "user": {**user.to_dict(), "role_label": ROLE_LABELS.get(user.role, user.role)},
        "items": [item.to_dict() for item in visible_menu(guard)],
        "groups": grouped_menu(guard),
        "default_screen": next((item.id for item in visible_menu(guard)), None),
    }), 200


@navigation_bp.get("/<screen_id>")
@require_auth
def screen_access_route(screen_id: str):
    """Whether the current user may open a screen; denial uses the fixed placeholder."""
    item = get_menu_item(screen_id)
    if item is None:
        return jsonify({"error": "Pantalla no encontrada"}), 404

    if not g.access_guard.has_permission(item.permission):
        return jsonify(ACCESS_DENIED.to_dict()), 403

    return jsonify({"screen": item.to_dict(), "allowed": True}), 200
