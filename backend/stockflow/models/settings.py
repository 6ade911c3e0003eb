from __future__ import annotations

from ..extensions import db
from ..money import money_float
from stockflow.time_utils import to_utc_z


class Settings(db.Model):
    """Per-business singleton of billing and alerting options."""
    __tablename__ = "settings"
    __table_args__ = (
        db.UniqueConstraint("business_id", name="uq_settings_business"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False)

    bill_prefix = db.Column(db.String(16), nullable=False, default="INV")
    default_tax_percentage = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    low_stock_threshold_default = db.Column(db.Integer, nullable=False, default=10)
    enable_email_alerts = db.Column(db.Boolean, nullable=False, default=False)
    enable_expiry_alerts = db.Column(db.Boolean, nullable=False, default=False)
    enable_overstock_alerts = db.Column(db.Boolean, nullable=False, default=True)
    currency_symbol = db.Column(db.String(8), nullable=False, default="₹")

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    business = db.relationship("Business", backref=db.backref("settings", uselist=False))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "bill_prefix": self.bill_prefix,
            "default_tax_percentage": money_float(self.default_tax_percentage),
            "low_stock_threshold_default": self.low_stock_threshold_default,
            "enable_email_alerts": self.enable_email_alerts,
            "enable_expiry_alerts": self.enable_expiry_alerts,
            "enable_overstock_alerts": self.enable_overstock_alerts,
            "currency_symbol": self.currency_symbol,
            "updated_at": to_utc_z(self.updated_at),
        }
