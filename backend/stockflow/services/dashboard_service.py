# Overview: Service-layer operations for the dashboard; aggregate counters for the home screen.

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import func

from ..extensions import db
from ..models import Alert, Bill, BillItem, Customer, Product, Supplier
from ..money import ZERO, money_float, round_money
from .activity_service import recent_activities
from .tenant_service import scoped_query
from stockflow.time_utils import today


def _sales_between(business_id: int, start, end=None):
    query = db.session.query(func.coalesce(func.sum(Bill.total_amount), 0), func.count(Bill.id)).filter(
        Bill.business_id == business_id, Bill.bill_date >= start
    )
    if end is not None:
        query = query.filter(Bill.bill_date <= end)
    amount, count = query.one()
    return round_money(amount), int(count or 0)


def _profit_on(business_id: int, day) -> object:
    margin = (
        db.session.query(
            func.coalesce(func.sum(BillItem.quantity * (BillItem.unit_price - Product.purchase_price)), 0)
        )
        .select_from(BillItem)
        .join(Bill, BillItem.bill_id == Bill.id)
        .join(Product, BillItem.product_id == Product.id)
        .filter(Bill.business_id == business_id, Bill.bill_date == day)
        .scalar()
    )
    return round_money(margin)


def metrics(business_id: int) -> dict:
    products = scoped_query(Product, business_id).filter(Product.is_active.is_(True)).all()
    stock_value = sum((product.current_stock * product.purchase_price for product in products), ZERO)

    current_day = today()
    yesterday = current_day - timedelta(days=1)
    today_amount, today_count = _sales_between(business_id, current_day, current_day)
    yesterday_amount, _ = _sales_between(business_id, yesterday, yesterday)
    month_amount, _ = _sales_between(business_id, current_day.replace(day=1))

    if yesterday_amount > ZERO:
        trend = round_money((today_amount - yesterday_amount) / yesterday_amount * 100)
    elif today_amount > ZERO:
        trend = round_money(100)
    else:
        trend = ZERO

    return {
        "totalProducts": len(products),
        "inStockCount": sum(1 for p in products if p.current_stock > p.min_stock_level),
        "lowStockAlerts": sum(1 for p in products if p.current_stock < p.min_stock_level),
        "outOfStockCount": sum(1 for p in products if p.current_stock == 0),
        "totalStockValue": money_float(round_money(stock_value)),
        "todaySales": money_float(today_amount),
        "todaysProfit": money_float(_profit_on(business_id, current_day)),
        "todaysSalesCount": today_count,
        "yesterdaysSales": money_float(yesterday_amount),
        "salesTrend": money_float(trend),
        "monthSales": money_float(month_amount),
        "totalCustomers": scoped_query(Customer, business_id).count(),
        "totalSuppliers": scoped_query(Supplier, business_id).count(),
        "unreadAlerts": scoped_query(Alert, business_id).filter(Alert.is_read.is_(False)).count(),
    }


def activities(business_id: int, limit: int = 10) -> list[dict]:
    return [entry.to_dict() for entry in recent_activities(business_id, limit)]


def sales_chart(business_id: int, days: int = 7) -> list[dict]:
    """Daily sales totals from `days` days ago through today, days without sales omitted."""
    start = today() - timedelta(days=days)
    rows = (
        db.session.query(Bill.bill_date, func.sum(Bill.total_amount))
        .filter(Bill.business_id == business_id, Bill.bill_date >= start)
        .group_by(Bill.bill_date)
        .order_by(Bill.bill_date.asc())
        .all()
    )
    return [{"date": bill_date.isoformat(), "sales": money_float(amount)} for bill_date, amount in rows]
