# Overview: Receipt configuration routes; read, replace, patch, reset and preview.

from flask import Blueprint, jsonify, g

from ..decorators import require_auth, require_permission
from ..services import receipt_service, settings_service
from ..time_utils import to_utc_z, utcnow
from .common import error_response, json_body


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")

# Sample sale rendered by the preview endpoint
PREVIEW_SALE = {
    "id": 1,
    "subtotal": 45000,
    "discount_amount": 5000,
    "total_amount": 40000,
    "payment_type": "cash",
    "payment_status": "paid",
    "total_paid": 50000,
    "customer": {"name": "Cliente de Ejemplo", "cedula": "1234567890"},
    "user": {"name": "Vendedor"},
    "sale_items": [
        {"product": {"name": "Producto de ejemplo"}, "quantity": 2, "unit_price": 15000, "total_price": 30000},
        {"product": {"name": "Otro producto"}, "quantity": 1, "unit_price": 15000, "total_price": 15000},
    ],
}


@settings_bp.get("/receipt")
@require_auth
@require_permission("manage_settings")
def get_receipt_settings_route():
    try:
        config = settings_service.get_receipt_config()
    except ValueError as e:
        return error_response(e)
    return jsonify({"settings": config.to_dict()}), 200


@settings_bp.put("/receipt")
@require_auth
@require_permission("manage_settings")
def replace_receipt_settings_route():
    """Replace the whole configuration; omitted options fall back to defaults."""
    try:
        config = settings_service.update_receipt_config(json_body(), user_id=g.current_user.id, replace=True)
    except ValueError as e:
        return error_response(e)
    return jsonify({"settings": config.to_dict()}), 200


@settings_bp.patch("/receipt")
@require_auth
@require_permission("manage_settings")
def patch_receipt_settings_route():
    try:
        config = settings_service.update_receipt_config(json_body(), user_id=g.current_user.id)
    except ValueError as e:
        return error_response(e)
    return jsonify({"settings": config.to_dict()}), 200


@settings_bp.post("/receipt/reset")
@require_auth
@require_permission("manage_settings")
def reset_receipt_settings_route():
    config = settings_service.reset_receipt_config(user_id=g.current_user.id)
    return jsonify({"settings": config.to_dict()}), 200


@settings_bp.post("/receipt/preview")
@require_auth
@require_permission("manage_settings")
def preview_receipt_route():
    """
    Render the sample sale with unsaved options.

    Body: option overrides merged over the stored configuration.
    """
    try:
        config = settings_service.get_receipt_config().merged(json_body())
    except ValueError as e:
        return error_response(e)

    sale = {**PREVIEW_SALE, "created_at": to_utc_z(utcnow())}
    return jsonify({"html": receipt_service.format_receipt(sale, config)}), 200
