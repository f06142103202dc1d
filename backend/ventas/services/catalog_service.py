# Overview: Service-layer operations for products, categories and suppliers.

"""
Catalog Service

Plain CRUD over validated patch dicts (see validation.validate_payload).
Uniqueness rules (product barcode, category name) are checked here and
raised as ConflictError; references to categories and suppliers must exist.
"""

from sqlalchemy import func, or_

from ..extensions import db
from ..models import Category, Product, Supplier, SaleItem
from ..validation import ConflictError, NotFoundError


def _apply_patch(record, patch: dict) -> None:
    for key, value in patch.items():
        setattr(record, key, value)


# =============================================================================
# CATEGORIES
# =============================================================================

def list_categories() -> list[Category]:
    return db.session.query(Category).order_by(Category.name).all()


def get_category(category_id: int) -> Category:
    category = db.session.get(Category, category_id)
    if not category:
        raise NotFoundError("Categoría no encontrada")
    return category


def _check_category_name(name: str | None, exclude_id: int | None = None) -> None:
    if not name:
        return
    query = db.session.query(Category).filter(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first():
        raise ConflictError("Ya existe una categoría con este nombre")


def create_category(patch: dict) -> Category:
    _check_category_name(patch.get("name"))
    category = Category()
    _apply_patch(category, patch)
    db.session.add(category)
    db.session.commit()
    return category


def update_category(category_id: int, patch: dict) -> Category:
    category = get_category(category_id)
    _check_category_name(patch.get("name"), exclude_id=category.id)
    _apply_patch(category, patch)
    db.session.commit()
    return category


def delete_category(category_id: int) -> None:
    """Delete a category. Its products are kept and become uncategorized."""
    category = get_category(category_id)
    db.session.query(Product).filter_by(category_id=category.id).update(
        {"category_id": None}, synchronize_session=False
    )
    db.session.delete(category)
    db.session.commit()


# =============================================================================
# SUPPLIERS
# =============================================================================

def list_suppliers() -> list[Supplier]:
    return db.session.query(Supplier).order_by(Supplier.name).all()


def get_supplier(supplier_id: int) -> Supplier:
    supplier = db.session.get(Supplier, supplier_id)
    if not supplier:
        raise NotFoundError("Proveedor no encontrado")
    return supplier


def create_supplier(patch: dict) -> Supplier:
    supplier = Supplier()
    _apply_patch(supplier, patch)
    db.session.add(supplier)
    db.session.commit()
    return supplier


def update_supplier(supplier_id: int, patch: dict) -> Supplier:
    supplier = get_supplier(supplier_id)
    _apply_patch(supplier, patch)
    db.session.commit()
    return supplier


def delete_supplier(supplier_id: int) -> None:
    supplier = get_supplier(supplier_id)
    db.session.query(Product).filter_by(supplier_id=supplier.id).update(
        {"supplier_id": None}, synchronize_session=False
    )
    db.session.delete(supplier)
    db.session.commit()


# =============================================================================
# PRODUCTS
# =============================================================================

def list_products(
    *,
    search: str | None = None,
    category_id: int | None = None,
    low_stock_threshold: int | None = None,
) -> list[Product]:
    """
    List products ordered by name.

    search matches name or barcode (case-insensitive substring).
    low_stock_threshold keeps only products with stock at or below it.
    """
    query = db.session.query(Product)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(or_(
            func.lower(Product.name).like(pattern),
            func.lower(Product.barcode).like(pattern),
        ))
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if low_stock_threshold is not None:
        query = query.filter(Product.stock <= low_stock_threshold)
    return query.order_by(Product.name).all()


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Producto no encontrado")
    return product


def _check_product_refs(patch: dict, exclude_id: int | None = None) -> None:
    barcode = patch.get("barcode")
    if barcode:
        query = db.session.query(Product).filter(Product.barcode == barcode)
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise ConflictError("Ya existe un producto con este código de barras")

    if patch.get("category_id") is not None:
        get_category(patch["category_id"])
    if patch.get("supplier_id") is not None:
        get_supplier(patch["supplier_id"])


def create_product(patch: dict) -> Product:
    _check_product_refs(patch)
    product = Product()
    _apply_patch(product, patch)
    db.session.add(product)
    db.session.commit()
    return product


def update_product(product_id: int, patch: dict) -> Product:
    product = get_product(product_id)
    _check_product_refs(patch, exclude_id=product.id)
    _apply_patch(product, patch)
    db.session.commit()
    return product


def delete_product(product_id: int) -> None:
    """
    Delete a product that has never been sold.

    Raises ConflictError when sale lines reference it; sales history must stay intact.
    """
    product = get_product(product_id)
    in_use = db.session.query(SaleItem.id).filter_by(product_id=product.id).first()
    if in_use:
        raise ConflictError("No se puede eliminar un producto con ventas registradas")
    db.session.delete(product)
    db.session.commit()
