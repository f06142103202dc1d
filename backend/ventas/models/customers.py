from __future__ import annotations

from ..extensions import db
from ventas.time_utils import to_utc_z


class Customer(db.Model):
    """Customer record. Required for installment sales."""
    __tablename__ = "customers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    cedula = db.Column(db.String(32), nullable=True, unique=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    address = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "cedula": self.cedula or "",
            "email": self.email or "",
            "phone": self.phone or "",
            "address": self.address or "",
            "created_at": to_utc_z(self.created_at),
        }
