# Overview: Service-layer operations for the supplier registry.

from __future__ import annotations

from sqlalchemy import or_

from ..errors import ValidationError
from ..extensions import db
from ..models import Product, Purchase, Supplier
from ..schemas import SupplierInput, SupplierUpdateInput
from .session_service import RequestContext
from .tenant_service import get_owned_or_404, scoped_query


def list_suppliers(business_id: int, search: str | None = None) -> list[Supplier]:
    query = scoped_query(Supplier, business_id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Supplier.supplier_name.ilike(pattern), Supplier.contact_person.ilike(pattern)))
    return query.order_by(Supplier.created_at.desc(), Supplier.id.desc()).all()


def get_supplier(business_id: int, supplier_id: int) -> Supplier:
    return get_owned_or_404(Supplier, supplier_id, business_id, "Supplier")


def create_supplier(ctx: RequestContext, data: SupplierInput) -> Supplier:
    supplier = Supplier(
        business_id=ctx.business_id,
        supplier_name=data.supplier_name,
        contact_person=data.contact_person,
        phone=data.phone,
        email=data.email,
        address=data.address,
        gst_number=data.gst_number,
    )
    db.session.add(supplier)
    db.session.commit()
    return supplier


def update_supplier(ctx: RequestContext, supplier_id: int, data: SupplierUpdateInput) -> Supplier:
    supplier = get_supplier(ctx.business_id, supplier_id)
    for column, value in data.changes.items():
        setattr(supplier, column, value)
    db.session.commit()
    return supplier


def delete_supplier(ctx: RequestContext, supplier_id: int) -> None:
    supplier = get_supplier(ctx.business_id, supplier_id)
    in_use = (
        scoped_query(Purchase, ctx.business_id).filter(Purchase.supplier_id == supplier.id).first()
        or scoped_query(Product, ctx.business_id).filter(Product.supplier_id == supplier.id).first()
    )
    if in_use:
        raise ValidationError("Cannot delete a supplier referenced by products or purchases")
    db.session.delete(supplier)
    db.session.commit()
