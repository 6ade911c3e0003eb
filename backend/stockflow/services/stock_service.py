# Overview: Stock mutation primitive; the only writer of Product.current_stock.

"""
Stock mutation primitive.

Two flavors:

- apply_delta_atomic: one conditional UPDATE
      current_stock = current_stock + delta
      WHERE id = ? AND business_id = ? [AND current_stock >= -delta]
  The database applies the arithmetic, so a concurrent writer cannot cause a
  lost update, and a decrement can never take stock below zero. A zero
  rowcount means the product is missing or the stock is insufficient.

- apply_delta_read_modify_write: read current_stock, compute the new value in
  Python, write the absolute value back. Two concurrent writers can both read
  the same stale value and one update is lost; stock may go negative. Kept
  only for the "compensating" write mode, which reproduces the legacy
  behavior of the multi-item sale and purchase flows.

Neither function commits; the caller's write unit owns the transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import update

from ..errors import InsufficientStockError, NotFoundError
from ..extensions import db
from ..models import Product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockChange:
    product_id: int
    previous_stock: int
    new_stock: int

    @property
    def delta(self) -> int:
        return self.new_stock - self.previous_stock


def _load(business_id: int, product_id: int) -> Product:
    product = (
        db.session.query(Product)
        .filter(Product.id == product_id, Product.business_id == business_id)
        .populate_existing()
        .first()
    )
    if product is None:
        raise NotFoundError("Product not found")
    return product


def read_stock(business_id: int, product_id: int) -> int:
    """Current stock as seen by this session right now."""
    return _load(business_id, product_id).current_stock


def insufficient_stock(product_name: str, available: int, requested: int) -> InsufficientStockError:
    return InsufficientStockError(
        f"Insufficient stock for {product_name}. Available: {available}, Requested: {requested}",
        details={"available": available, "requested": requested},
    )


def apply_delta_atomic(*, business_id: int, product_id: int, delta: int) -> StockChange:
    """Single conditional UPDATE; raises InsufficientStockError instead of going negative."""
    stmt = update(Product).where(Product.id == product_id, Product.business_id == business_id)
    if delta < 0:
        stmt = stmt.where(Product.current_stock >= -delta)
    stmt = stmt.values(current_stock=Product.current_stock + delta).execution_options(
        synchronize_session=False
    )

    result = db.session.execute(stmt)
    product = _load(business_id, product_id)  # refreshes the identity map copy

    if result.rowcount == 0:
        raise InsufficientStockError(
            f"Insufficient stock. Available: {product.current_stock} units",
            details={"available": product.current_stock, "requested": -delta},
        )

    return StockChange(
        product_id=product_id,
        previous_stock=product.current_stock - delta,
        new_stock=product.current_stock,
    )


def apply_delta_read_modify_write(*, business_id: int, product_id: int, delta: int) -> StockChange:
    """Read, add in memory, write back the absolute value. Not safe under concurrency."""
    previous = read_stock(business_id, product_id)
    new_stock = previous + delta
    db.session.execute(
        update(Product)
        .where(Product.id == product_id, Product.business_id == business_id)
        .values(current_stock=new_stock)
        .execution_options(synchronize_session=False)
    )
    _load(business_id, product_id)
    if new_stock < 0:
        logger.warning("Product id=%s stock went negative (%s)", product_id, new_stock)
    return StockChange(product_id=product_id, previous_stock=previous, new_stock=new_stock)


def apply_delta(*, business_id: int, product_id: int, delta: int, atomic: bool = True) -> StockChange:
    if atomic:
        return apply_delta_atomic(business_id=business_id, product_id=product_id, delta=delta)
    return apply_delta_read_modify_write(business_id=business_id, product_id=product_id, delta=delta)
