# Overview: Flask API routes for sales, abonos and printable receipts.

"""
Sales routes

SECURITY:
- Creating a sale requires create_sales
- Listing and reading sales requires view_sales
- Deleting a sale requires both view_sales and manage_sales
- Abonos and the installment list require manage_installments
"""

from flask import Blueprint, jsonify, request, g
from sqlalchemy.exc import SQLAlchemyError

from ..decorators import require_all_permissions, require_any_permission, require_auth, require_permission
from ..services import receipt_service, sales_service, settings_service
from .common import degraded, error_response, json_body


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")
installments_bp = Blueprint("installments", __name__, url_prefix="/api/installments")


def _receipt_response(sale_data: dict, kind: str):
    """Render a receipt with the stored configuration plus its print options."""
    config = settings_service.get_receipt_config()
    html = receipt_service.format_receipt(sale_data, config, kind)
    return jsonify({
        "html": html,
        "receipt_number": receipt_service.receipt_number(sale_data.get("id")),
        "kind": kind,
        "print_enabled": config.print_enabled,
        "auto_print": config.auto_print,
        "print_copies": config.print_copies,
    }), 200


# -- Sales --

@sales_bp.get("")
@require_auth
@require_permission("view_sales")
def list_sales_route():
    """
    List sales, newest first.

    Query params:
    - payment_type: cash | installment
    - payment_status: paid | partial | pending
    - customer_id: int
    - limit: int (default 100, max 500)
    """
    limit = max(1, min(request.args.get("limit", 100, type=int), 500))
    try:
        sales = sales_service.list_sales(
            payment_type=request.args.get("payment_type") or None,
            payment_status=request.args.get("payment_status") or None,
            customer_id=request.args.get("customer_id", type=int),
            limit=limit,
        )
    except SQLAlchemyError:
        return degraded("items", [])

    return jsonify({"items": [s.to_dict(include_items=False) for s in sales], "degraded": False}), 200


@sales_bp.post("")
@require_auth
@require_permission("create_sales")
def create_sale_route():
    """
    Record a sale from the point of sale screen.

    Body:
    - items: [{product_id, quantity}, ...]
    - customer_id: int (required for installment sales)
    - payment_type: cash | installment
    - discount_amount, amount_received, initial_payment: whole pesos
    - payment_method: cash | transfer | card (initial abono)
    """
    try:
        data = json_body()
        sale = sales_service.create_sale(
            g.current_user.id,
            data.get("items"),
            customer_id=data.get("customer_id"),
            payment_type=data.get("payment_type") or "cash",
            discount_amount=data.get("discount_amount") or 0,
            amount_received=data.get("amount_received"),
            initial_payment=data.get("initial_payment") or 0,
            payment_method=data.get("payment_method") or "cash",
        )
    except ValueError as e:
        return error_response(e)

    return jsonify(sale.to_dict()), 201


@sales_bp.get("/<int:sale_id>")
@require_auth
@require_any_permission("view_sales", "manage_installments")
def get_sale_route(sale_id: int):
    try:
        sale = sales_service.get_sale(sale_id)
    except ValueError as e:
        return error_response(e)
    return jsonify(sale.to_dict()), 200


@sales_bp.delete("/<int:sale_id>")
@require_auth
@require_all_permissions("view_sales", "manage_sales")
def delete_sale_route(sale_id: int):
    """Delete a sale; stock is restored unless ?restore_stock=false."""
    restore = request.args.get("restore_stock", "true").lower() not in {"0", "false", "no"}
    try:
        sales_service.delete_sale(sale_id, restore_stock=restore)
    except ValueError as e:
        return error_response(e)
    return jsonify({"ok": True}), 200


@sales_bp.get("/<int:sale_id>/receipt")
@require_auth
@require_any_permission("view_sales", "create_sales")
def sale_receipt_route(sale_id: int):
    try:
        sale = sales_service.get_sale(sale_id)
        return _receipt_response(sale.to_dict(), receipt_service.KIND_SALE)
    except ValueError as e:
        return error_response(e)


# -- Installments (abonos) --

@installments_bp.get("")
@require_auth
@require_permission("manage_installments")
def list_installments_route():
    """Installment sales; ?payment_status=pending|partial|paid filters."""
    try:
        sales = sales_service.list_installment_sales(request.args.get("payment_status") or None)
    except SQLAlchemyError:
        return degraded("items", [])
    return jsonify({"items": [s.to_dict() for s in sales], "degraded": False}), 200


@installments_bp.get("/<int:sale_id>/payments")
@require_auth
@require_permission("manage_installments")
def list_payments_route(sale_id: int):
    try:
        sale = sales_service.get_sale(sale_id)
    except ValueError as e:
        return error_response(e)
    return jsonify({
        "sale_id": sale.id,
        "total_amount": sale.total_amount,
        "total_paid": sale.total_paid,
        "remaining_balance": sale.remaining_balance,
        "payments": [p.to_dict() for p in sale.payments],
    }), 200


@installments_bp.post("/<int:sale_id>/payments")
@require_auth
@require_permission("manage_installments")
def record_payment_route(sale_id: int):
    """
    Register an abono.

    Body: {amount, payment_method?, notes?}
    Rejected when the amount exceeds the remaining balance.
    """
    try:
        data = json_body()
        sale, payment, paid_before = sales_service.record_payment(
            sale_id,
            data.get("amount"),
            user_id=g.current_user.id,
            payment_method=data.get("payment_method") or "cash",
            notes=data.get("notes"),
        )
    except ValueError as e:
        return error_response(e)

    return jsonify({
        "sale": sale.to_dict(),
        "payment": payment.to_dict(),
        "paid_before": paid_before,
    }), 201


@installments_bp.get("/<int:sale_id>/payments/<int:payment_id>/receipt")
@require_auth
@require_permission("manage_installments")
def payment_receipt_route(sale_id: int, payment_id: int):
    try:
        sale = sales_service.get_sale(sale_id)
        payment = sales_service.get_payment(sale_id, payment_id)
        data = sales_service.installment_receipt_data(sale, payment)
        return _receipt_response(data, receipt_service.KIND_INSTALLMENT)
    except ValueError as e:
        return error_response(e)
