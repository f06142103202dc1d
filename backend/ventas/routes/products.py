# Overview: Flask API routes for products and categories; parses input and returns JSON responses.

"""
Product and category routes

SECURITY: All routes require authentication.
- Read operations require view_products / view_categories
- Write operations require manage_products / manage_categories
"""

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from ..decorators import require_auth, require_permission
from ..models import Category, Product
from ..services import catalog_service
from ..validation import ModelValidationPolicy, enforce_rules_product, validate_payload
from .common import degraded, error_response, json_body


PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "description", "barcode", "sale_price", "purchase_price",
        "stock", "category_id", "supplier_id",
    },
    required_on_create={"name", "sale_price"},
)

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description"},
    required_on_create={"name"},
)


products_bp = Blueprint("products", __name__, url_prefix="/api/products")
categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


# -- Products --

@products_bp.get("")
@require_auth
@require_permission("view_products")
def list_products_route():
    """
    List products.

    Query params:
    - search: str (optional) - name or barcode substring
    - category_id: int (optional)
    - low_stock: flag (optional) - only products at or below LOW_STOCK_THRESHOLD
    """
    low_stock = request.args.get("low_stock") in {"1", "true", "yes"}
    try:
        products = catalog_service.list_products(
            search=request.args.get("search"),
            category_id=request.args.get("category_id", type=int),
            low_stock_threshold=current_app.config["LOW_STOCK_THRESHOLD"] if low_stock else None,
        )
    except SQLAlchemyError:
        return degraded("items", [])

    return jsonify({"items": [p.to_dict() for p in products], "degraded": False}), 200


@products_bp.get("/<int:product_id>")
@require_auth
@require_permission("view_products")
def get_product_route(product_id: int):
    try:
        product = catalog_service.get_product(product_id)
    except ValueError as e:
        return error_response(e)
    return jsonify(product.to_dict()), 200


@products_bp.post("")
@require_auth
@require_permission("manage_products")
def create_product_route():
    try:
        patch = validate_payload(model=Product, payload=json_body(), policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
        product = catalog_service.create_product(patch)
    except ValueError as e:
        return error_response(e)
    return jsonify(product.to_dict()), 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_permission("manage_products")
def update_product_route(product_id: int):
    try:
        patch = validate_payload(model=Product, payload=json_body(), policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
        product = catalog_service.update_product(product_id, patch)
    except ValueError as e:
        return error_response(e)
    return jsonify(product.to_dict()), 200


@products_bp.delete("/<int:product_id>")
@require_auth
@require_permission("manage_products")
def delete_product_route(product_id: int):
    try:
        catalog_service.delete_product(product_id)
    except ValueError as e:
        return error_response(e)
    return jsonify({"ok": True}), 200


# -- Categories --

@categories_bp.get("")
@require_auth
@require_permission("view_categories")
def list_categories_route():
    try:
        categories = catalog_service.list_categories()
    except SQLAlchemyError:
        return degraded("items", [])
    return jsonify({"items": [c.to_dict() for c in categories], "degraded": False}), 200


@categories_bp.post("")
@require_auth
@require_permission("manage_categories")
def create_category_route():
    try:
        patch = validate_payload(model=Category, payload=json_body(), policy=CATEGORY_POLICY, partial=False)
        category = catalog_service.create_category(patch)
    except ValueError as e:
        return error_response(e)
    return jsonify(category.to_dict()), 201


@categories_bp.put("/<int:category_id>")
@require_auth
@require_permission("manage_categories")
def update_category_route(category_id: int):
    try:
        patch = validate_payload(model=Category, payload=json_body(), policy=CATEGORY_POLICY, partial=True)
        category = catalog_service.update_category(category_id, patch)
    except ValueError as e:
        return error_response(e)
    return jsonify(category.to_dict()), 200


@categories_bp.delete("/<int:category_id>")
@require_auth
@require_permission("manage_categories")
def delete_category_route(category_id: int):
    try:
        catalog_service.delete_category(category_id)
    except ValueError as e:
        return error_response(e)
    return jsonify({"ok": True}), 200
