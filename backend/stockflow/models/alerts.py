from __future__ import annotations

from ..extensions import db
from stockflow.time_utils import to_utc_z


class Alert(db.Model):
    """
    Stock threshold notification.

    Rows accumulate: a new alert is written on every qualifying stock change
    unless alert de-duplication is switched on in config.
    """
    __tablename__ = "alerts"
    __table_args__ = (
        db.Index("ix_alerts_business_read", "business_id", "is_read"),
        db.Index("ix_alerts_product_open", "product_id", "alert_type", "is_resolved"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    alert_type = db.Column(db.String(32), nullable=False)
    message = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    is_resolved = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        product = None
        if self.product is not None:
            product = {
                "id": self.product.id,
                "product_name": self.product.product_name,
                "sku": self.product.sku,
                "current_stock": self.product.current_stock,
                "min_stock_level": self.product.min_stock_level,
            }
        return {
            "id": self.id,
            "product_id": self.product_id,
            "alert_type": self.alert_type,
            "message": self.message,
            "is_read": self.is_read,
            "is_resolved": self.is_resolved,
            "created_at": to_utc_z(self.created_at),
            "product": product,
        }
