from __future__ import annotations

from ..extensions import db
from ventas.time_utils import to_utc_z


class Setting(db.Model):
    """
    Key-value application settings.

    Values are JSON documents. The "receipt" key holds the receipt
    configuration validated by ReceiptConfig.
    """
    __tablename__ = "settings"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(128), nullable=False, unique=True)
    value = db.Column(db.JSON, nullable=True)

    updated_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "key": self.key,
            "value": self.value,
            "updated_by_user_id": self.updated_by_user_id,
            "updated_at": to_utc_z(self.updated_at),
        }
