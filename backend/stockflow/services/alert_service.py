# Overview: Stock-level classification and alert row generation.

"""
Alert generator.

classify_stock_level() is a pure function of
(current_stock, min_stock_level, max_stock_level):

    current_stock == 0                 -> out_of_stock
    current_stock <  min_stock_level   -> low_stock
    current_stock >  max_stock_level   -> overstock
    otherwise                          -> None

generate_for_product() runs after every stock mutation. By default each
qualifying call inserts a new row, so repeated threshold crossings leave an
audit trail of alerts. With STOCKFLOW_DEDUPLICATE_ALERTS on, the insert is
skipped when an unresolved alert of the same type already exists for the
product.

Once a mutation brings stock back inside its limits, the product's open
alerts are resolved.
"""

from __future__ import annotations

import logging

from flask import current_app
from sqlalchemy import update

from ..constants import (
    ALERT_LOW_STOCK,
    ALERT_OUT_OF_STOCK,
    ALERT_OVERSTOCK,
    STOCK_IN,
    STOCK_LOW,
    STOCK_OUT,
    STOCK_OVER,
)
from ..extensions import db
from ..models import Alert, Product, Settings
from .tenant_service import get_owned_or_404, scoped_query

logger = logging.getLogger(__name__)

_STATUS_BY_ALERT = {
    ALERT_OUT_OF_STOCK: STOCK_OUT,
    ALERT_LOW_STOCK: STOCK_LOW,
    ALERT_OVERSTOCK: STOCK_OVER,
    None: STOCK_IN,
}


def classify_stock_level(current_stock: int, min_stock_level: int, max_stock_level: int) -> str | None:
    if current_stock == 0:
        return ALERT_OUT_OF_STOCK
    if current_stock < min_stock_level:
        return ALERT_LOW_STOCK
    if current_stock > max_stock_level:
        return ALERT_OVERSTOCK
    return None


def stock_status(product: Product) -> str:
    """OUT_OF_STOCK / LOW_STOCK / OVERSTOCK / IN_STOCK label for payloads."""
    alert_type = classify_stock_level(product.current_stock, product.min_stock_level, product.max_stock_level)
    return _STATUS_BY_ALERT[alert_type]


def alert_message(alert_type: str, product: Product) -> str:
    name = product.product_name
    if alert_type == ALERT_OUT_OF_STOCK:
        return f'Product "{name}" is out of stock!'
    if alert_type == ALERT_LOW_STOCK:
        return (
            f'Product "{name}" is running low. Current stock: {product.current_stock}, '
            f"Minimum required: {product.min_stock_level}"
        )
    return (
        f'Product "{name}" is overstocked. Current stock: {product.current_stock}, '
        f"Maximum limit: {product.max_stock_level}"
    )


def _overstock_enabled(business_id: int) -> bool:
    settings = db.session.query(Settings).filter_by(business_id=business_id).first()
    return True if settings is None else bool(settings.enable_overstock_alerts)


def _has_open_alert(business_id: int, product_id: int, alert_type: str) -> bool:
    return (
        scoped_query(Alert, business_id)
        .filter(
            Alert.product_id == product_id,
            Alert.alert_type == alert_type,
            Alert.is_resolved.is_(False),
        )
        .first()
        is not None
    )


def generate_for_product(*, business_id: int, product_id: int) -> Alert | None:
    """
    Classify the product's current stock and insert an alert if needed.

    Flushes, does not commit.
    """
    product = get_owned_or_404(Product, product_id, business_id, "Product")
    alert_type = classify_stock_level(product.current_stock, product.min_stock_level, product.max_stock_level)
    if alert_type is None:
        resolved = resolve_open_alerts(business_id=business_id, product_id=product_id)
        if resolved:
            logger.info("Resolved %s alerts for product: %s", resolved, product.product_name)
        return None
    if alert_type == ALERT_OVERSTOCK and not _overstock_enabled(business_id):
        return None
    if current_app.config.get("STOCKFLOW_DEDUPLICATE_ALERTS") and _has_open_alert(
        business_id, product_id, alert_type
    ):
        logger.debug("Skipping duplicate %s alert for product id=%s", alert_type, product_id)
        return None

    alert = Alert(
        business_id=business_id,
        product_id=product_id,
        alert_type=alert_type,
        message=alert_message(alert_type, product),
        is_read=False,
        is_resolved=False,
    )
    db.session.add(alert)
    db.session.flush()
    logger.info("%s alert generated for product: %s", alert_type, product.product_name)
    return alert


def generate_for_products(*, business_id: int, product_ids) -> list[Alert]:
    created = []
    for product_id in dict.fromkeys(product_ids):
        alert = generate_for_product(business_id=business_id, product_id=product_id)
        if alert is not None:
            created.append(alert)
    return created


def resolve_open_alerts(*, business_id: int, product_id: int) -> int:
    """Mark every unresolved alert of a product resolved (and read)."""
    result = db.session.execute(
        update(Alert)
        .where(
            Alert.business_id == business_id,
            Alert.product_id == product_id,
            Alert.is_resolved.is_(False),
        )
        .values(is_resolved=True, is_read=True)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


# ---------------------------------------------------------------------------
# alert endpoints
# ---------------------------------------------------------------------------

def list_alerts(business_id: int, *, is_read: bool | None = None, alert_type: str | None = None) -> list[Alert]:
    query = scoped_query(Alert, business_id)
    if is_read is not None:
        query = query.filter(Alert.is_read.is_(is_read))
    if alert_type:
        query = query.filter(Alert.alert_type == alert_type)
    return query.order_by(Alert.created_at.desc(), Alert.id.desc()).all()


def mark_read(business_id: int, alert_id: int) -> Alert:
    alert = get_owned_or_404(Alert, alert_id, business_id, "Alert")
    alert.is_read = True
    db.session.commit()
    return alert


def mark_resolved(business_id: int, alert_id: int) -> Alert:
    alert = get_owned_or_404(Alert, alert_id, business_id, "Alert")
    alert.is_resolved = True
    alert.is_read = True
    db.session.commit()
    return alert


def delete_alert(business_id: int, alert_id: int) -> None:
    alert = get_owned_or_404(Alert, alert_id, business_id, "Alert")
    db.session.delete(alert)
    db.session.commit()


def purge_resolved(business_id: int | None = None) -> int:
    """Delete resolved alerts (all businesses when business_id is None)."""
    query = db.session.query(Alert).filter(Alert.is_resolved.is_(True))
    if business_id is not None:
        query = query.filter(Alert.business_id == business_id)
    count = query.delete(synchronize_session=False)
    db.session.commit()
    return count
