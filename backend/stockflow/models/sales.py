from __future__ import annotations

from ..extensions import db
from ..money import money_float
from stockflow.time_utils import to_utc_z, to_iso_date, today


class Bill(db.Model):
    """
    Sales document header.

    bill_number is unique per business. Line items carry a denormalized
    snapshot of the product name and pricing at the time of sale.
    """
    __tablename__ = "bills"
    __table_args__ = (
        db.UniqueConstraint("business_id", "bill_number", name="uq_bills_business_number"),
        db.Index("ix_bills_business_date", "business_id", "bill_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True, index=True)
    bill_number = db.Column(db.String(64), nullable=False)
    bill_date = db.Column(db.Date, nullable=False, default=today)

    subtotal = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    discount_percentage = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    discount_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    tax_percentage = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    tax_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    paid_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    balance_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    payment_method = db.Column(db.String(16), nullable=False)
    payment_status = db.Column(db.String(16), nullable=False, default="paid")
    notes = db.Column(db.Text, nullable=True)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    customer = db.relationship("Customer")
    items = db.relationship(
        "BillItem",
        backref="bill",
        cascade="all, delete-orphan",
        order_by="BillItem.id",
        lazy=True,
    )
    payments = db.relationship(
        "Payment",
        backref="bill",
        cascade="all, delete-orphan",
        lazy=True,
    )

    def __repr__(self) -> str:
        return f"<Bill id={self.id} number={self.bill_number!r} total={self.total_amount}>"

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "business_id": self.business_id,
            "bill_number": self.bill_number,
            "bill_date": to_iso_date(self.bill_date),
            "customer_id": self.customer_id,
            "customer_name": self.customer.customer_name if self.customer else None,
            "subtotal": money_float(self.subtotal),
            "discount_percentage": money_float(self.discount_percentage),
            "discount_amount": money_float(self.discount_amount),
            "tax_percentage": money_float(self.tax_percentage),
            "tax_amount": money_float(self.tax_amount),
            "total_amount": money_float(self.total_amount),
            "paid_amount": money_float(self.paid_amount),
            "balance_amount": money_float(self.balance_amount),
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "notes": self.notes,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class BillItem(db.Model):
    __tablename__ = "bill_items"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    bill_id = db.Column(db.Integer, db.ForeignKey("bills.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    # Snapshot at time of sale
    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    discount_percentage = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    discount_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    tax_percentage = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    tax_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    subtotal = db.Column(db.Numeric(12, 2), nullable=False)
    total = db.Column(db.Numeric(12, 2), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "bill_id": self.bill_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": money_float(self.unit_price),
            "discount_percentage": money_float(self.discount_percentage),
            "discount_amount": money_float(self.discount_amount),
            "tax_percentage": money_float(self.tax_percentage),
            "tax_amount": money_float(self.tax_amount),
            "subtotal": money_float(self.subtotal),
            "total": money_float(self.total),
        }


class Payment(db.Model):
    """Money received against a bill."""
    __tablename__ = "payments"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    bill_id = db.Column(db.Integer, db.ForeignKey("bills.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_method = db.Column(db.String(16), nullable=False)
    payment_date = db.Column(db.Date, nullable=False, default=today)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "bill_id": self.bill_id,
            "amount": money_float(self.amount),
            "payment_method": self.payment_method,
            "payment_date": to_iso_date(self.payment_date),
            "created_at": to_utc_z(self.created_at),
        }
