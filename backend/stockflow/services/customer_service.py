# Overview: Service-layer operations for the customer registry.

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import or_, update

from ..errors import ValidationError
from ..extensions import db
from ..models import Bill, Customer
from ..schemas import CustomerInput, CustomerUpdateInput
from .session_service import RequestContext
from .tenant_service import get_owned_or_404, scoped_query


def list_customers(business_id: int, search: str | None = None) -> list[Customer]:
    query = scoped_query(Customer, business_id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Customer.customer_name.ilike(pattern), Customer.phone.ilike(pattern)))
    return query.order_by(Customer.created_at.desc(), Customer.id.desc()).all()


def get_customer(business_id: int, customer_id: int) -> Customer:
    return get_owned_or_404(Customer, customer_id, business_id, "Customer")


def customer_detail(business_id: int, customer_id: int) -> dict:
    customer = get_customer(business_id, customer_id)
    bills = (
        scoped_query(Bill, business_id)
        .filter(Bill.customer_id == customer.id)
        .order_by(Bill.bill_date.desc(), Bill.id.desc())
        .limit(20)
        .all()
    )
    data = customer.to_dict()
    data["recent_bills"] = [bill.to_dict() for bill in bills]
    return data


def create_customer(ctx: RequestContext, data: CustomerInput) -> Customer:
    customer = Customer(
        business_id=ctx.business_id,
        customer_name=data.customer_name,
        phone=data.phone,
        email=data.email,
        address=data.address,
        total_purchases=Decimal("0"),
    )
    db.session.add(customer)
    db.session.commit()
    return customer


def update_customer(ctx: RequestContext, customer_id: int, data: CustomerUpdateInput) -> Customer:
    customer = get_customer(ctx.business_id, customer_id)
    for column, value in data.changes.items():
        setattr(customer, column, value)
    db.session.commit()
    return customer


def delete_customer(ctx: RequestContext, customer_id: int) -> None:
    customer = get_customer(ctx.business_id, customer_id)
    has_bills = scoped_query(Bill, ctx.business_id).filter(Bill.customer_id == customer.id).first()
    if has_bills:
        raise ValidationError("Cannot delete a customer with existing bills")
    db.session.delete(customer)
    db.session.commit()


def add_to_total_purchases(*, business_id: int, customer_id: int, amount: Decimal, atomic: bool = True) -> Decimal:
    """
    Add a bill total to the customer's running sum.

    atomic=True issues total_purchases = total_purchases + amount in SQL;
    atomic=False reads, adds in Python, and writes back (legacy behavior,
    loses updates under concurrent bills for the same customer).
    """
    customer = get_customer(business_id, customer_id)
    if atomic:
        db.session.execute(
            update(Customer)
            .where(Customer.id == customer_id, Customer.business_id == business_id)
            .values(total_purchases=Customer.total_purchases + amount)
            .execution_options(synchronize_session=False)
        )
    else:
        new_total = Decimal(customer.total_purchases or 0) + amount
        db.session.execute(
            update(Customer)
            .where(Customer.id == customer_id, Customer.business_id == business_id)
            .values(total_purchases=new_total)
            .execution_options(synchronize_session=False)
        )
    db.session.refresh(customer)
    return customer.total_purchases
