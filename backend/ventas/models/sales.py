from __future__ import annotations

from ..extensions import db
from ventas.time_utils import to_utc_z


class Sale(db.Model):
    """
    Completed sale.

    PAYMENT TYPES:
    - cash: paid in full at the counter (total_paid is the amount received)
    - installment: paid over time with abonos (Payment rows)

    PAYMENT STATUS:
    - paid: total_paid >= total_amount
    - partial: some abonos recorded
    - pending: nothing paid yet
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_created", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    subtotal = db.Column(db.Integer, nullable=False, default=0)
    discount_amount = db.Column(db.Integer, nullable=False, default=0)
    total_amount = db.Column(db.Integer, nullable=False, default=0)

    payment_type = db.Column(db.String(16), nullable=False, default="cash")
    payment_status = db.Column(db.String(16), nullable=False, default="paid", index=True)
    total_paid = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("sales", lazy=True))
    user = db.relationship("User", backref=db.backref("sales", lazy=True))
    items = db.relationship(
        "SaleItem",
        backref="sale",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="SaleItem.id",
    )
    payments = db.relationship(
        "Payment",
        backref="sale",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="Payment.id",
    )

    @property
    def remaining_balance(self) -> int:
        return max(0, self.total_amount - self.total_paid)

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "customer_id": self.customer_id,
            "user_id": self.user_id,
            "subtotal": self.subtotal,
            "discount_amount": self.discount_amount,
            "total_amount": self.total_amount,
            "payment_type": self.payment_type,
            "payment_status": self.payment_status,
            "total_paid": self.total_paid,
            "remaining_balance": self.remaining_balance,
            "created_at": to_utc_z(self.created_at),
            "customer": self.customer.to_dict() if self.customer else None,
            "user": {"id": self.user.id, "name": self.user.name} if self.user else None,
        }
        if include_items:
            data["sale_items"] = [item.to_dict() for item in self.items]
            data["payments"] = [payment.to_dict() for payment in self.payments]
        return data


class SaleItem(db.Model):
    __tablename__ = "sale_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Integer, nullable=False)
    total_price = db.Column(db.Integer, nullable=False)

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "total_price": self.total_price,
            "product": {"id": self.product.id, "name": self.product.name} if self.product else None,
        }


class Payment(db.Model):
    """
    Abono recorded against an installment sale.

    IMMUTABLE: abonos are never edited; a mistaken abono is corrected by
    deleting the whole sale.
    """
    __tablename__ = "payments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    amount = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(32), nullable=False, default="cash")
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "user_id": self.user_id,
            "amount": self.amount,
            "payment_method": self.payment_method,
            "notes": self.notes or "",
            "created_at": to_utc_z(self.created_at),
        }
