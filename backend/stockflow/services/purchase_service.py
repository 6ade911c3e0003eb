# Overview: Service-layer operations for purchases (stock intake).

"""
Purchase workflow: record a supplier invoice and add its quantities to stock.

    invoice pre-check -> validate supplier/products -> header -> items
                      -> stock increments -> alerts -> activity

The invoice-number check is a read before the insert; the per-business
unique constraint is the final guard. Stock increments never fail for lack
of stock, but in compensating mode they are read-modify-write and may lose a
concurrent update.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, or_

from ..errors import DuplicateError, NotFoundError
from ..extensions import db
from ..models import Product, Purchase, PurchaseItem, Supplier
from ..schemas import DateRange, Page, PurchaseInput, PurchaseUpdateInput
from . import activity_service, alert_service, stock_service
from .pricing_service import purchase_total
from .session_service import RequestContext
from .tenant_service import get_owned_optional, get_owned_or_404, scoped_query
from .write_unit import WriteUnit
from stockflow.time_utils import today

logger = logging.getLogger(__name__)


def _invoice_taken(business_id: int, invoice_number: str) -> bool:
    return (
        db.session.query(Purchase.id)
        .filter(Purchase.business_id == business_id, Purchase.invoice_number == invoice_number)
        .first()
        is not None
    )


def _load_products(business_id: int, product_ids) -> dict[int, Product]:
    wanted = set(product_ids)
    products = scoped_query(Product, business_id).filter(Product.id.in_(wanted)).all()
    found = {product.id: product for product in products}
    missing = sorted(wanted - set(found))
    if missing:
        raise NotFoundError("Product not found", details={"product_ids": missing})
    return found


def insert_purchase(ctx: RequestContext, *, invoice_number: str, supplier_id, purchase_date, total_amount,
                    payment_status: str, notes) -> Purchase:
    purchase = Purchase(
        business_id=ctx.business_id,
        supplier_id=supplier_id,
        invoice_number=invoice_number,
        purchase_date=purchase_date or today(),
        total_amount=total_amount,
        payment_status=payment_status,
        notes=notes,
        created_by=ctx.user_id,
    )
    db.session.add(purchase)
    return purchase


def insert_purchase_items(purchase: Purchase, rows) -> list[PurchaseItem]:
    """rows: iterable of (product_id, quantity, purchase_price, subtotal)."""
    items = []
    for product_id, quantity, price, subtotal in rows:
        item = PurchaseItem(
            purchase_id=purchase.id,
            product_id=product_id,
            quantity=quantity,
            purchase_price=price,
            subtotal=subtotal,
        )
        db.session.add(item)
        items.append(item)
    return items


def delete_purchase_rows(purchase_id: int) -> None:
    db.session.query(PurchaseItem).filter(PurchaseItem.purchase_id == purchase_id).delete(
        synchronize_session=False
    )
    db.session.query(Purchase).filter(Purchase.id == purchase_id).delete(synchronize_session=False)


def create_purchase(ctx: RequestContext, data: PurchaseInput) -> tuple[Purchase, list[str]]:
    if _invoice_taken(ctx.business_id, data.invoice_number):
        raise DuplicateError("Invoice number already exists")
    get_owned_optional(Supplier, data.supplier_id, ctx.business_id, "Supplier")
    _load_products(ctx.business_id, [item.product_id for item in data.items])

    subtotals, total = purchase_total((item.quantity, item.purchase_price) for item in data.items)
    rows = [
        (item.product_id, item.quantity, item.purchase_price, subtotal)
        for item, subtotal in zip(data.items, subtotals)
    ]

    with WriteUnit("create purchase") as unit:
        atomic_stock = not unit.compensating

        purchase = unit.step(
            "insert purchase",
            lambda: insert_purchase(
                ctx,
                invoice_number=data.invoice_number,
                supplier_id=data.supplier_id,
                purchase_date=data.purchase_date,
                total_amount=total,
                payment_status=data.payment_status,
                notes=data.notes,
            ),
            compensate=lambda created: delete_purchase_rows(created.id),
        )
        unit.step("insert purchase items", lambda: insert_purchase_items(purchase, rows))

        for item in data.items:
            unit.side_effect(
                f"increment stock for product {item.product_id}",
                lambda item=item: stock_service.apply_delta(
                    business_id=ctx.business_id,
                    product_id=item.product_id,
                    delta=item.quantity,
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
                entity_type="purchase",
                entity_id=purchase.id,
                description=f"Purchase {data.invoice_number} recorded for {total}",
            ),
        )

    logger.info("Purchase created: %s (business id=%s)", data.invoice_number, ctx.business_id)
    return purchase, unit.warnings


def get_purchase(business_id: int, purchase_id: int) -> Purchase:
    return get_owned_or_404(Purchase, purchase_id, business_id, "Purchase")


def list_purchases(
    business_id: int,
    *,
    page: Page,
    search: str | None = None,
    date_range: DateRange | None = None,
    payment_status: str | None = None,
    supplier_id: int | None = None,
) -> tuple[list[dict], dict]:
    item_count = (
        db.session.query(PurchaseItem.purchase_id, func.count(PurchaseItem.id).label("total_items"))
        .group_by(PurchaseItem.purchase_id)
        .subquery()
    )
    query = (
        db.session.query(Purchase, func.coalesce(item_count.c.total_items, 0))
        .outerjoin(item_count, item_count.c.purchase_id == Purchase.id)
        .outerjoin(Supplier, Purchase.supplier_id == Supplier.id)
        .filter(Purchase.business_id == business_id)
    )
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Purchase.invoice_number.ilike(pattern), Supplier.supplier_name.ilike(pattern)))
    if date_range is not None:
        query = query.filter(
            Purchase.purchase_date >= date_range.start_date,
            Purchase.purchase_date <= date_range.end_date,
        )
    if payment_status:
        query = query.filter(Purchase.payment_status == payment_status)
    if supplier_id is not None:
        query = query.filter(Purchase.supplier_id == supplier_id)

    total = query.count()
    rows = (
        query.order_by(Purchase.purchase_date.desc(), Purchase.id.desc())
        .offset(page.offset)
        .limit(page.limit)
        .all()
    )
    purchases = []
    for purchase, total_items in rows:
        data = purchase.to_dict()
        data["total_items"] = total_items
        purchases.append(data)
    pagination = {
        "total": total,
        "page": page.page,
        "limit": page.limit,
        "totalPages": (total + page.limit - 1) // page.limit,
    }
    return purchases, pagination


def update_purchase(ctx: RequestContext, purchase_id: int, data: PurchaseUpdateInput) -> Purchase:
    purchase = get_purchase(ctx.business_id, purchase_id)
    if data.payment_status is not None:
        purchase.payment_status = data.payment_status
    if data.notes_provided:
        purchase.notes = data.notes
    db.session.commit()
    return purchase


def delete_purchase(ctx: RequestContext, purchase_id: int) -> None:
    """Delete a purchase and its items; stock it added is left in place."""
    purchase = get_purchase(ctx.business_id, purchase_id)
    invoice_number = purchase.invoice_number
    db.session.delete(purchase)
    activity_service.record_activity(
        business_id=ctx.business_id,
        user_id=ctx.user_id,
        action="delete",
        entity_type="purchase",
        entity_id=purchase_id,
        description=f"Purchase {invoice_number} deleted",
    )
    db.session.commit()
