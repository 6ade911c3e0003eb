# Overview: Service-layer operations for bills (sales); the multi-item sale workflow.

"""
Sale (bill) creation workflow.

    validate -> number -> totals -> insert header -> insert items
             -> adjust stock -> payment -> customer total -> alerts -> activity

Validation happens before any write: items present, payment method known,
customer and every product owned by the business, and for each product the
summed requested quantity <= current_stock. Failures raise 400/404 errors
with nothing written.

Header + items are a pair: if the items cannot be written, the header is
gone afterwards (rolled back in transactional mode, deleted by compensation
in compensating mode). What happens to the later steps depends on the write
mode; see services/write_unit.py.

Stock:
- transactional mode: atomic conditional decrement per item; a concurrent
  sale that drains the stock between validation and write fails the whole
  bill with InsufficientStockError.
- compensating mode: read-modify-write per item; failures are logged and
  the bill stays (known "bill recorded, stock not adjusted" inconsistency).
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import or_

from ..errors import NotFoundError
from ..extensions import db
from ..models import Bill, BillItem, Customer, Payment, Product
from ..money import ZERO, round_money
from ..schemas import DateRange, Page, SaleInput, SaleUpdateInput
from . import activity_service, alert_service, customer_service, stock_service
from .identifier_service import next_bill_number
from .pricing_service import DocumentTotals, LineInput, balance, compute_document
from .session_service import RequestContext
from .settings_service import get_settings
from .tenant_service import get_owned_optional, get_owned_or_404, scoped_query
from .write_unit import WriteUnit
from stockflow.time_utils import today

logger = logging.getLogger(__name__)


def load_products(business_id: int, product_ids) -> dict[int, Product]:
    """Fetch products by id within the business; any missing id -> 404."""
    wanted = set(product_ids)
    products = (
        scoped_query(Product, business_id)
        .filter(Product.id.in_(wanted), Product.is_active.is_(True))
        .all()
    )
    found = {product.id: product for product in products}
    missing = sorted(wanted - set(found))
    if missing:
        raise NotFoundError("Product not found", details={"product_ids": missing})
    return found


def validate_stock(products: dict[int, Product], quantities: list[tuple[int, int]]) -> None:
    """
    Reject the sale if any product's total requested quantity exceeds stock.

    Quantities are summed per product so a product listed twice is checked
    against its combined quantity.
    """
    requested: dict[int, int] = {}
    for product_id, qty in quantities:
        requested[product_id] = requested.get(product_id, 0) + qty

    insufficient = []
    for product_id, qty in requested.items():
        product = products[product_id]
        if product.current_stock < qty:
            insufficient.append({
                "product_id": product_id,
                "product_name": product.product_name,
                "available": product.current_stock,
                "requested": qty,
            })

    if insufficient:
        first = insufficient[0]
        error = stock_service.insufficient_stock(first["product_name"], first["available"], first["requested"])
        error.details = {"items": insufficient}
        raise error


def _insert_bill(ctx: RequestContext, data: SaleInput, bill_number: str, totals: DocumentTotals,
                 paid: Decimal) -> Bill:
    bill = Bill(
        business_id=ctx.business_id,
        customer_id=data.customer_id,
        bill_number=bill_number,
        bill_date=today(),
        subtotal=totals.subtotal,
        discount_percentage=totals.discount_percentage,
        discount_amount=totals.discount_amount,
        tax_percentage=totals.tax_percentage,
        tax_amount=totals.tax_amount,
        total_amount=totals.total_amount,
        paid_amount=paid,
        balance_amount=balance(totals.total_amount, paid),
        payment_method=data.payment_method,
        payment_status=data.payment_status,
        notes=data.notes,
        created_by=ctx.user_id,
    )
    db.session.add(bill)
    return bill


def _insert_bill_items(bill: Bill, data: SaleInput, products: dict[int, Product],
                       totals: DocumentTotals) -> list[BillItem]:
    items = []
    for item, line in zip(data.items, totals.lines):
        bill_item = BillItem(
            bill_id=bill.id,
            product_id=item.product_id,
            product_name=products[item.product_id].product_name,
            quantity=line.quantity,
            unit_price=line.unit_price,
            discount_percentage=line.discount_percentage,
            discount_amount=line.discount_amount,
            tax_percentage=line.tax_percentage,
            tax_amount=line.tax_amount,
            subtotal=line.subtotal,
            total=line.total,
        )
        db.session.add(bill_item)
        items.append(bill_item)
    return items


def _delete_bill(bill_id: int) -> None:
    db.session.query(BillItem).filter(BillItem.bill_id == bill_id).delete(synchronize_session=False)
    db.session.query(Payment).filter(Payment.bill_id == bill_id).delete(synchronize_session=False)
    db.session.query(Bill).filter(Bill.id == bill_id).delete(synchronize_session=False)


def _insert_payment(ctx: RequestContext, bill: Bill, amount: Decimal, method: str) -> Payment:
    payment = Payment(
        business_id=ctx.business_id,
        bill_id=bill.id,
        amount=amount,
        payment_method=method,
        created_by=ctx.user_id,
    )
    db.session.add(payment)
    return payment


def create_bill(ctx: RequestContext, data: SaleInput) -> tuple[Bill, list[str]]:
    """
    Create a bill with its items and all downstream effects.

    Returns (bill, warnings). warnings lists side effects that failed and
    were skipped; it is always empty in transactional mode.
    """
    get_owned_optional(Customer, data.customer_id, ctx.business_id, "Customer")
    products = load_products(ctx.business_id, [item.product_id for item in data.items])
    validate_stock(products, [(item.product_id, item.quantity) for item in data.items])

    lines = [
        LineInput(
            quantity=item.quantity,
            unit_price=item.unit_price if item.unit_price is not None else products[item.product_id].selling_price,
            discount_percentage=item.discount_percentage,
            tax_percentage=item.tax_percentage,
        )
        for item in data.items
    ]
    totals = compute_document(
        lines,
        discount_percentage=data.discount_percentage,
        tax_percentage=data.tax_percentage,
    )
    paid = round_money(data.paid_amount)
    settings = get_settings(ctx.business_id)
    bill_number = next_bill_number(business_id=ctx.business_id, prefix=settings.bill_prefix, on_date=today())

    with WriteUnit("create bill") as unit:
        atomic_stock = not unit.compensating

        bill = unit.step(
            "insert bill",
            lambda: _insert_bill(ctx, data, bill_number, totals, paid),
            compensate=lambda created: _delete_bill(created.id),
        )
        unit.step("insert bill items", lambda: _insert_bill_items(bill, data, products, totals))

        for item in data.items:
            unit.side_effect(
                f"decrement stock for product {item.product_id}",
                lambda item=item: stock_service.apply_delta(
                    business_id=ctx.business_id,
                    product_id=item.product_id,
                    delta=-item.quantity,
                    atomic=atomic_stock,
                ),
            )

        if paid > ZERO:
            unit.side_effect("record payment", lambda: _insert_payment(ctx, bill, paid, data.payment_method))

        if data.customer_id is not None:
            unit.side_effect(
                "update customer total",
                lambda: customer_service.add_to_total_purchases(
                    business_id=ctx.business_id,
                    customer_id=data.customer_id,
                    amount=totals.total_amount,
                    atomic=atomic_stock,
                ),
            )

        unit.side_effect(
            "generate alerts",
            lambda: alert_service.generate_for_products(
                business_id=ctx.business_id, product_ids=[item.product_id for item in data.items]
            ),
        )
        unit.side_effect(
            "record activity",
            lambda: activity_service.record_activity(
                business_id=ctx.business_id,
                user_id=ctx.user_id,
                action="create",
                entity_type="bill",
                entity_id=bill.id,
                description=f"Bill {bill_number} created for {totals.total_amount}",
            ),
        )

    logger.info("Bill created: %s (business id=%s)", bill_number, ctx.business_id)
    return bill, unit.warnings


def get_bill(business_id: int, bill_id: int) -> Bill:
    return get_owned_or_404(Bill, bill_id, business_id, "Bill")


def bill_detail(bill: Bill) -> dict:
    data = bill.to_dict(include_items=True)
    data["payments"] = [payment.to_dict() for payment in bill.payments]
    if bill.customer is not None:
        data["customer"] = {
            "id": bill.customer.id,
            "customer_name": bill.customer.customer_name,
            "phone": bill.customer.phone,
        }
    return data


def list_bills(
    business_id: int,
    *,
    page: Page,
    search: str | None = None,
    date_range: DateRange | None = None,
    payment_status: str | None = None,
) -> tuple[list[Bill], dict]:
    query = scoped_query(Bill, business_id).outerjoin(Customer, Bill.customer_id == Customer.id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Bill.bill_number.ilike(pattern), Customer.customer_name.ilike(pattern)))
    if date_range is not None:
        query = query.filter(Bill.bill_date >= date_range.start_date, Bill.bill_date <= date_range.end_date)
    if payment_status:
        query = query.filter(Bill.payment_status == payment_status)

    total = query.count()
    bills = (
        query.order_by(Bill.bill_date.desc(), Bill.id.desc())
        .offset(page.offset)
        .limit(page.limit)
        .all()
    )
    pagination = {
        "total": total,
        "page": page.page,
        "limit": page.limit,
        "totalPages": (total + page.limit - 1) // page.limit,
    }
    return bills, pagination


def update_bill(ctx: RequestContext, bill_id: int, data: SaleUpdateInput) -> Bill:
    bill = get_bill(ctx.business_id, bill_id)
    if data.payment_status is not None:
        bill.payment_status = data.payment_status
    if data.paid_amount is not None:
        paid = round_money(data.paid_amount)
        bill.paid_amount = paid
        bill.balance_amount = balance(bill.total_amount, paid)
    if data.notes_provided:
        bill.notes = data.notes
    db.session.commit()
    return bill


def delete_bill(ctx: RequestContext, bill_id: int) -> None:
    """
    Delete a bill with its items and payments.

    Stock sold by the bill and the customer's running total are NOT restored.
    """
    bill = get_bill(ctx.business_id, bill_id)
    bill_number = bill.bill_number
    db.session.delete(bill)
    activity_service.record_activity(
        business_id=ctx.business_id,
        user_id=ctx.user_id,
        action="delete",
        entity_type="bill",
        entity_id=bill_id,
        description=f"Bill {bill_number} deleted",
    )
    db.session.commit()
    logger.info("Bill deleted: %s (business id=%s)", bill_number, ctx.business_id)
