# Overview: Flask API routes for customers and suppliers; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from ..decorators import require_auth, require_permission
from ..models import Customer, Supplier
from ..services import catalog_service, customer_service
from ..validation import ModelValidationPolicy, validate_payload
from .common import degraded, error_response, json_body


CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "cedula", "email", "phone", "address"},
    required_on_create={"name"},
)

SUPPLIER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "contact_person", "email", "phone", "address"},
    required_on_create={"name"},
)


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")
suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")


# -- Customers --

@customers_bp.get("")
@require_auth
@require_permission("view_customers")
def list_customers_route():
    try:
        customers = customer_service.list_customers(search=request.args.get("search"))
    except SQLAlchemyError:
        return degraded("items", [])
    return jsonify({"items": [c.to_dict() for c in customers], "degraded": False}), 200


@customers_bp.get("/<int:customer_id>")
@require_auth
@require_permission("view_customers")
def get_customer_route(customer_id: int):
    try:
        customer = customer_service.get_customer(customer_id)
    except ValueError as e:
        return error_response(e)
    return jsonify(customer.to_dict()), 200


@customers_bp.post("")
@require_auth
@require_permission("manage_customers")
def create_customer_route():
    try:
        patch = validate_payload(model=Customer, payload=json_body(), policy=CUSTOMER_POLICY, partial=False)
        customer = customer_service.create_customer(patch)
    except ValueError as e:
        return error_response(e)
    return jsonify(customer.to_dict()), 201


@customers_bp.put("/<int:customer_id>")
@require_auth
@require_permission("manage_customers")
def update_customer_route(customer_id: int):
    try:
        patch = validate_payload(model=Customer, payload=json_body(), policy=CUSTOMER_POLICY, partial=True)
        customer = customer_service.update_customer(customer_id, patch)
    except ValueError as e:
        return error_response(e)
    return jsonify(customer.to_dict()), 200


@customers_bp.delete("/<int:customer_id>")
@require_auth
@require_permission("manage_customers")
def delete_customer_route(customer_id: int):
    try:
        customer_service.delete_customer(customer_id)
    except ValueError as e:
        return error_response(e)
    return jsonify({"ok": True}), 200


# -- Suppliers --

@suppliers_bp.get("")
@require_auth
@require_permission("view_suppliers")
def list_suppliers_route():
    try:
        suppliers = catalog_service.list_suppliers()
    except SQLAlchemyError:
        return degraded("items", [])
    return jsonify({"items": [s.to_dict() for s in suppliers], "degraded": False}), 200


@suppliers_bp.post("")
@require_auth
@require_permission("manage_suppliers")
def create_supplier_route():
    try:
        patch = validate_payload(model=Supplier, payload=json_body(), policy=SUPPLIER_POLICY, partial=False)
        supplier = catalog_service.create_supplier(patch)
    except ValueError as e:
        return error_response(e)
    return jsonify(supplier.to_dict()), 201


@suppliers_bp.put("/<int:supplier_id>")
@require_auth
@require_permission("manage_suppliers")
def update_supplier_route(supplier_id: int):
    try:
        patch = validate_payload(model=Supplier, payload=json_body(), policy=SUPPLIER_POLICY, partial=True)
        supplier = catalog_service.update_supplier(supplier_id, patch)
    except ValueError as e:
        return error_response(e)
    return jsonify(supplier.to_dict()), 200


@suppliers_bp.delete("/<int:supplier_id>")
@require_auth
@require_permission("manage_suppliers")
def delete_supplier_route(supplier_id: int):
    try:
        catalog_service.delete_supplier(supplier_id)
    except ValueError as e:
        return error_response(e)
    return jsonify({"ok": True}), 200
