# Overview: Service-layer operations for barcode scan-to-buy and scan-to-sell.

"""
Barcode flows (single product per request).

Unlike the multi-item flows, the stock change here is a mandatory step and
always atomic in both write modes:

- barcode purchase: header -> item -> stock increment
- barcode sale:     pre-check -> header -> item -> conditional decrement

If the decrement finds less stock than requested (another sale got there
first), the header and item are removed: rolled back in transactional mode,
deleted by compensation in compensating mode. Either way the response is
"Insufficient stock" and no orphan bill remains.
"""

from __future__ import annotations

import logging

from ..errors import InsufficientStockError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Bill, BillItem, Customer, Product, Supplier
from ..money import ZERO, round_money
from ..schemas import BarcodePurchaseInput, BarcodeSaleInput
from . import activity_service, alert_service, customer_service, stock_service
from .identifier_service import barcode_bill_number, barcode_invoice_number
from .purchase_service import delete_purchase_rows, insert_purchase, insert_purchase_items
from .session_service import RequestContext
from .tenant_service import get_owned_optional, scoped_query
from .write_unit import WriteUnit
from stockflow.constants import PAYMENT_PAID, PAYMENT_PENDING
from stockflow.time_utils import today

logger = logging.getLogger(__name__)


def lookup(business_id: int, barcode: str) -> Product:
    product = (
        scoped_query(Product, business_id)
        .filter(Product.barcode == barcode, Product.is_active.is_(True))
        .first()
    )
    if product is None:
        raise NotFoundError("Product not found with this barcode")
    return product


def barcode_purchase(ctx: RequestContext, data: BarcodePurchaseInput) -> dict:
    product = lookup(ctx.business_id, data.barcode)
    get_owned_optional(Supplier, data.supplier_id, ctx.business_id, "Supplier")
    product_id = product.id
    subtotal = round_money(data.quantity * round_money(data.purchase_price))
    invoice_number = barcode_invoice_number()

    with WriteUnit("record barcode purchase") as unit:
        purchase = unit.step(
            "insert purchase",
            lambda: insert_purchase(
                ctx,
                invoice_number=invoice_number,
                supplier_id=data.supplier_id,
                purchase_date=today(),
                total_amount=subtotal,
                payment_status=PAYMENT_PENDING,
                notes=data.notes,
            ),
            compensate=lambda created: delete_purchase_rows(created.id),
        )
        unit.step(
            "insert purchase item",
            lambda: insert_purchase_items(purchase, [(product_id, data.quantity, data.purchase_price, subtotal)]),
        )
        change = unit.step(
            "increment stock",
            lambda: stock_service.apply_delta_atomic(
                business_id=ctx.business_id, product_id=product_id, delta=data.quantity
            ),
        )
        unit.side_effect(
            "generate alerts",
            lambda: alert_service.generate_for_product(business_id=ctx.business_id, product_id=product_id),
        )
        unit.side_effect(
            "record activity",
            lambda: activity_service.record_activity(
                business_id=ctx.business_id,
                user_id=ctx.user_id,
                action="barcode_purchase",
                entity_type="purchase",
                entity_id=purchase.id,
                description=f"Scanned in {data.quantity} x {product.product_name} ({invoice_number})",
            ),
        )

    logger.info("Barcode purchase %s: product id=%s +%s", invoice_number, product_id, data.quantity)
    return {
        "purchase": purchase.to_dict(include_items=True),
        "product": {
            "id": product_id,
            "name": product.product_name,
            "barcode": product.barcode,
            "previousStock": change.previous_stock,
            "newStock": change.new_stock,
            "quantityAdded": data.quantity,
        },
        "warnings": unit.warnings,
    }


def _insert_barcode_bill(ctx: RequestContext, data: BarcodeSaleInput, bill_number: str, subtotal, discount,
                         total) -> Bill:
    bill = Bill(
        business_id=ctx.business_id,
        customer_id=data.customer_id,
        bill_number=bill_number,
        bill_date=today(),
        subtotal=subtotal,
        discount_percentage=ZERO,
        discount_amount=discount,
        tax_percentage=ZERO,
        tax_amount=ZERO,
        total_amount=total,
        paid_amount=total,
        balance_amount=ZERO,
        payment_method=data.payment_method,
        payment_status=PAYMENT_PAID,
        created_by=ctx.user_id,
    )
    db.session.add(bill)
    return bill


def _insert_barcode_bill_item(bill: Bill, product: Product, quantity: int, unit_price, subtotal,
                              discount, total) -> BillItem:
    item = BillItem(
        bill_id=bill.id,
        product_id=product.id,
        product_name=product.product_name,
        quantity=quantity,
        unit_price=unit_price,
        discount_percentage=ZERO,
        discount_amount=discount,
        tax_percentage=ZERO,
        tax_amount=ZERO,
        subtotal=subtotal,
        total=total,
    )
    db.session.add(item)
    return item


def _delete_bill_items(bill_id: int) -> None:
    db.session.query(BillItem).filter(BillItem.bill_id == bill_id).delete(synchronize_session=False)


def _delete_bill(bill_id: int) -> None:
    db.session.query(Bill).filter(Bill.id == bill_id).delete(synchronize_session=False)


def barcode_sale(ctx: RequestContext, data: BarcodeSaleInput) -> dict:
    product = lookup(ctx.business_id, data.barcode)
    get_owned_optional(Customer, data.customer_id, ctx.business_id, "Customer")
    product_id = product.id

    available = stock_service.read_stock(ctx.business_id, product_id)
    if available < data.quantity:
        raise InsufficientStockError(
            f"Insufficient stock. Available: {available} units",
            details={"available": available, "requested": data.quantity},
        )

    unit_price = round_money(product.selling_price)
    subtotal = round_money(unit_price * data.quantity)
    discount = round_money(data.discount)
    if discount > subtotal:
        raise ValidationError("Discount cannot exceed the sale amount")
    total = round_money(subtotal - discount)
    bill_number = barcode_bill_number()

    with WriteUnit("record barcode sale") as unit:
        bill = unit.step(
            "insert bill",
            lambda: _insert_barcode_bill(ctx, data, bill_number, subtotal, discount, total),
            compensate=lambda created: _delete_bill(created.id),
        )
        unit.step(
            "insert bill item",
            lambda: _insert_barcode_bill_item(bill, product, data.quantity, unit_price, subtotal, discount, total),
            compensate=lambda created: _delete_bill_items(created.bill_id),
        )
        change = unit.step(
            "decrement stock",
            lambda: stock_service.apply_delta_atomic(
                business_id=ctx.business_id, product_id=product_id, delta=-data.quantity
            ),
        )
        if data.customer_id is not None:
            unit.side_effect(
                "update customer total",
                lambda: customer_service.add_to_total_purchases(
                    business_id=ctx.business_id, customer_id=data.customer_id, amount=total
                ),
            )
        unit.side_effect(
            "generate alerts",
            lambda: alert_service.generate_for_product(business_id=ctx.business_id, product_id=product_id),
        )
        unit.side_effect(
            "record activity",
            lambda: activity_service.record_activity(
                business_id=ctx.business_id,
                user_id=ctx.user_id,
                action="barcode_sale",
                entity_type="bill",
                entity_id=bill.id,
                description=f"Scanned out {data.quantity} x {product.product_name} ({bill_number})",
            ),
        )

    logger.info("Barcode sale %s: product id=%s -%s", bill_number, product_id, data.quantity)
    return {
        "bill": {
            "id": bill.id,
            "billNumber": bill_number,
            "totalAmount": float(total),
            "paymentMethod": data.payment_method,
        },
        "product": {
            "id": product_id,
            "name": product.product_name,
            "barcode": product.barcode,
            "previousStock": change.previous_stock,
            "newStock": change.new_stock,
            "quantitySold": data.quantity,
        },
        "warnings": unit.warnings,
    }
