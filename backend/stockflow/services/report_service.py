# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

"""
Read-only reports over a business's products, bills and purchases.

Sales, purchase and profit/loss reports filter on the document date
(bill_date / purchase_date), both ends inclusive. Cost in the profit/loss
report uses each product's CURRENT purchase price, not the price at the
time of sale.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func

from ..constants import STOCK_LOW, STOCK_OUT, STOCK_OVER
from ..extensions import db
from ..models import Bill, BillItem, Product, Purchase
from ..money import ZERO, money_float, round_money
from ..schemas import DateRange
from .alert_service import stock_status
from .tenant_service import scoped_query

TOP_PRODUCTS_LIMIT = 10


def _average(total: Decimal, count: int) -> float:
    return money_float(round_money(total / count)) if count else 0.0


def stock_summary(business_id: int) -> dict:
    products = (
        scoped_query(Product, business_id)
        .filter(Product.is_active.is_(True))
        .order_by(Product.product_name.asc())
        .all()
    )

    rows = []
    total_value = ZERO
    counts = {STOCK_LOW: 0, STOCK_OUT: 0, STOCK_OVER: 0}
    for product in products:
        status = stock_status(product)
        value = round_money(product.current_stock * product.purchase_price)
        total_value += value
        if status in counts:
            counts[status] += 1

        data = product.to_dict()
        data["status"] = status
        data["stockValue"] = money_float(value)
        data["categoryName"] = product.category.category_name if product.category else "Uncategorized"
        rows.append(data)

    return {
        "products": rows,
        "summary": {
            "totalProducts": len(rows),
            "totalStockValue": money_float(round_money(total_value)),
            "lowStockCount": counts[STOCK_LOW],
            "outOfStockCount": counts[STOCK_OUT],
            "overstockCount": counts[STOCK_OVER],
        },
    }


def sales_report(business_id: int, date_range: DateRange) -> dict:
    bills = (
        scoped_query(Bill, business_id)
        .filter(Bill.bill_date >= date_range.start_date, Bill.bill_date <= date_range.end_date)
        .order_by(Bill.bill_date.desc(), Bill.id.desc())
        .all()
    )

    total_sales = ZERO
    total_discount = ZERO
    total_tax = ZERO
    by_method: dict[str, Decimal] = {}
    product_sales: dict[str, dict] = {}

    for bill in bills:
        total_sales += bill.total_amount
        total_discount += bill.discount_amount or ZERO
        total_tax += bill.tax_amount or ZERO
        by_method[bill.payment_method] = by_method.get(bill.payment_method, ZERO) + bill.total_amount
        for item in bill.items:
            entry = product_sales.setdefault(item.product_name, {"quantity": 0, "revenue": ZERO})
            entry["quantity"] += item.quantity
            entry["revenue"] += item.total

    top_products = sorted(
        (
            {"productName": name, "quantity": entry["quantity"], "revenue": money_float(entry["revenue"])}
            for name, entry in product_sales.items()
        ),
        key=lambda row: row["revenue"],
        reverse=True,
    )[:TOP_PRODUCTS_LIMIT]

    return {
        "bills": [bill.to_dict(include_items=True) for bill in bills],
        "summary": {
            "totalSales": money_float(round_money(total_sales)),
            "totalDiscount": money_float(round_money(total_discount)),
            "totalTax": money_float(round_money(total_tax)),
            "totalBills": len(bills),
            "averageBillValue": _average(total_sales, len(bills)),
            "paymentMethodBreakdown": {method: money_float(amount) for method, amount in by_method.items()},
            "topProducts": top_products,
        },
    }


def purchase_report(business_id: int, date_range: DateRange) -> dict:
    purchases = (
        scoped_query(Purchase, business_id)
        .filter(
            Purchase.purchase_date >= date_range.start_date,
            Purchase.purchase_date <= date_range.end_date,
        )
        .order_by(Purchase.purchase_date.desc(), Purchase.id.desc())
        .all()
    )
    total = sum((purchase.total_amount for purchase in purchases), ZERO)
    return {
        "purchases": [purchase.to_dict(include_items=True) for purchase in purchases],
        "summary": {
            "totalPurchases": money_float(round_money(total)),
            "totalOrders": len(purchases),
            "averageOrderValue": _average(total, len(purchases)),
        },
    }


def profit_loss(business_id: int, date_range: DateRange) -> dict:
    in_range = (
        Bill.business_id == business_id,
        Bill.bill_date >= date_range.start_date,
        Bill.bill_date <= date_range.end_date,
    )
    revenue = db.session.query(func.coalesce(func.sum(Bill.total_amount), 0)).filter(*in_range).scalar()
    cost = (
        db.session.query(func.coalesce(func.sum(BillItem.quantity * Product.purchase_price), 0))
        .select_from(BillItem)
        .join(Bill, BillItem.bill_id == Bill.id)
        .join(Product, BillItem.product_id == Product.id)
        .filter(*in_range)
        .scalar()
    )

    revenue = round_money(revenue)
    cost = round_money(cost)
    profit = round_money(revenue - cost)
    margin = round_money(profit / revenue * 100) if revenue > ZERO else ZERO
    return {
        "startDate": date_range.start_date.isoformat(),
        "endDate": date_range.end_date.isoformat(),
        "totalRevenue": money_float(revenue),
        "totalCost": money_float(cost),
        "profit": money_float(profit),
        "profitMargin": money_float(margin),
    }
