from __future__ import annotations

from ..extensions import db
from ventas.time_utils import to_utc_z


class Category(db.Model):
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, unique=True)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description or "",
            "created_at": to_utc_z(self.created_at),
        }


class Supplier(db.Model):
    __tablename__ = "suppliers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    contact_person = db.Column(db.String(128), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    address = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contact_person": self.contact_person or "",
            "email": self.email or "",
            "phone": self.phone or "",
            "address": self.address or "",
            "created_at": to_utc_z(self.created_at),
        }


class Product(db.Model):
    """
    Sellable product.

    Prices are whole pesos (COP has no fractional unit in circulation).
    Stock is decremented when a sale is recorded.
    """
    __tablename__ = "products"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    barcode = db.Column(db.String(64), nullable=True, unique=True)

    sale_price = db.Column(db.Integer, nullable=False, default=0)
    purchase_price = db.Column(db.Integer, nullable=False, default=0)
    stock = db.Column(db.Integer, nullable=False, default=0)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    category = db.relationship("Category", backref=db.backref("products", lazy=True))
    supplier = db.relationship("Supplier", backref=db.backref("products", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description or "",
            "barcode": self.barcode,
            "sale_price": self.sale_price,
            "purchase_price": self.purchase_price,
            "stock": self.stock,
            "category_id": self.category_id,
            "supplier_id": self.supplier_id,
            "category": self.category.to_dict() if self.category else None,
            "supplier": self.supplier.to_dict() if self.supplier else None,
            "created_at": to_utc_z(self.created_at),
        }
