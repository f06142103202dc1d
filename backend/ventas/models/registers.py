from __future__ import annotations

from ..extensions import db
from ventas.time_utils import to_utc_z


class CashRegister(db.Model):
    """
    Cash register shift for one employee.

    LIFECYCLE:
    - open: shift is active, sales and movements accumulate
    - closed: cash counted, discrepancy calculated

    IMMUTABLE: Once closed, the register cannot be reopened or modified.
    """
    __tablename__ = "cash_registers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    status = db.Column(db.String(16), nullable=False, default="open", index=True)  # open, closed

    opening_amount = db.Column(db.Integer, nullable=False, default=0)
    total_sales = db.Column(db.Integer, nullable=False, default=0)

    # Expected vs actual (calculated when closing)
    expected_closing_amount = db.Column(db.Integer, nullable=False, default=0)
    actual_closing_amount = db.Column(db.Integer, nullable=True)
    discrepancy_amount = db.Column(db.Integer, nullable=True)  # actual - expected
    discrepancy_reason = db.Column(db.Text, nullable=True)

    opened_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)
    closed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    session_notes = db.Column(db.Text, nullable=True)

    user = db.relationship("User", backref=db.backref("cash_registers", lazy=True))
    movements = db.relationship(
        "CashMovement",
        backref="cash_register",
        lazy=True,
        order_by="CashMovement.id",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "user": {"id": self.user.id, "name": self.user.name, "email": self.user.email} if self.user else None,
            "status": self.status,
            "opening_amount": self.opening_amount,
            "total_sales": self.total_sales,
            "expected_closing_amount": self.expected_closing_amount,
            "actual_closing_amount": self.actual_closing_amount,
            "discrepancy_amount": self.discrepancy_amount,
            "discrepancy_reason": self.discrepancy_reason or "",
            "opened_at": to_utc_z(self.opened_at),
            "closed_at": to_utc_z(self.closed_at) if self.closed_at else None,
            "session_notes": self.session_notes or "",
        }


class CashMovement(db.Model):
    """
    Cash register movement.

    MOVEMENT TYPES:
    - opening: opening float
    - sale: cash sale or abono received while the register is open
    - income: manual cash in
    - expense: manual cash out
    - closing: final count
    """
    __tablename__ = "cash_movements"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    cash_register_id = db.Column(db.Integer, db.ForeignKey("cash_registers.id"), nullable=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    type = db.Column(db.String(16), nullable=False, index=True)
    category = db.Column(db.String(64), nullable=True)
    amount = db.Column(db.Integer, nullable=False)
    description = db.Column(db.String(255), nullable=True)

    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cash_register_id": self.cash_register_id,
            "created_by": self.created_by,
            "type": self.type,
            "category": self.category,
            "amount": self.amount,
            "description": self.description or "",
            "sale_id": self.sale_id,
            "created_at": to_utc_z(self.created_at),
        }
