from __future__ import annotations

from ..extensions import db
from ..money import money_float
from stockflow.time_utils import to_utc_z


class Business(db.Model):
    """
    Tenant root.

    MULTI-TENANT: every business-owned row carries business_id and every query
    filters on it. Created once at registration; never deleted in normal flow.
    """
    __tablename__ = "businesses"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    business_name = db.Column(db.String(200), nullable=False)
    owner_name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    address = db.Column(db.Text, nullable=True)
    gst_number = db.Column(db.String(32), nullable=True)
    currency = db.Column(db.String(8), nullable=False, default="INR")
    tax_rate = db.Column(db.Numeric(5, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Business id={self.id} name={self.business_name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_name": self.business_name,
            "owner_name": self.owner_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "gst_number": self.gst_number,
            "currency": self.currency,
            "tax_rate": money_float(self.tax_rate),
            "created_at": to_utc_z(self.created_at),
        }
