# Overview: Service-layer operations for products, categories and stock adjustments.

"""
Product catalog service.

MULTI-TENANT: every lookup goes through tenant_service, so a product id from
another business behaves exactly like a missing one.

STOCK: create accepts an opening current_stock; afterwards stock only moves
through stock_service (sales, purchases, barcode flows, adjust_stock).
update_product never writes current_stock.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from ..constants import ADJUSTMENT_DECREASE, DEFAULT_MAX_STOCK_LEVEL
from ..errors import DuplicateError, ValidationError
from ..extensions import db
from ..models import Category, Product, StockAdjustment, Supplier
from ..money import ZERO, money_float, round_money
from ..schemas import CategoryInput, Page, ProductInput, ProductUpdateInput, StockAdjustmentInput
from . import activity_service, alert_service, stock_service
from .identifier_service import generate_sku
from .session_service import RequestContext
from .settings_service import get_settings
from .tenant_service import get_owned_optional, get_owned_or_404, scoped_query
from .write_unit import WriteUnit

logger = logging.getLogger(__name__)

DUPLICATE_SKU = "Product with this SKU already exists"
DUPLICATE_BARCODE = "Product with this barcode already exists"

SORTABLE_COLUMNS = {
    "created_at": Product.created_at,
    "product_name": Product.product_name,
    "sku": Product.sku,
    "current_stock": Product.current_stock,
    "selling_price": Product.selling_price,
    "purchase_price": Product.purchase_price,
}

_SKU_ATTEMPTS = 5


def product_payload(product: Product) -> dict:
    """Product dict plus stock_value, profit_margin and stock_status."""
    data = product.to_dict()
    purchase = round_money(product.purchase_price or ZERO)
    selling = round_money(product.selling_price or ZERO)
    data["stock_value"] = money_float(product.current_stock * purchase)
    if selling > 0:
        data["profit_margin"] = money_float((selling - purchase) / selling * Decimal("100"))
    else:
        data["profit_margin"] = 0.0
    data["stock_status"] = alert_service.stock_status(product)
    return data


def active_products(business_id: int):
    return scoped_query(Product, business_id).filter(Product.is_active.is_(True))


def _filter_by_status(query, status: str | None):
    if not status:
        return query
    if status == "low_stock":
        return query.filter(Product.current_stock < Product.min_stock_level)
    if status == "out_of_stock":
        return query.filter(Product.current_stock == 0)
    if status == "overstock":
        return query.filter(Product.current_stock > Product.max_stock_level)
    if status == "in_stock":
        return query.filter(
            Product.current_stock >= Product.min_stock_level,
            Product.current_stock <= Product.max_stock_level,
            Product.current_stock > 0,
        )
    raise ValidationError("status must be one of: low_stock, out_of_stock, overstock, in_stock")


def list_products(
    business_id: int,
    *,
    page: Page,
    search: str | None = None,
    category_id: int | None = None,
    status: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> tuple[list[Product], dict]:
    query = active_products(business_id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Product.product_name.ilike(pattern), Product.sku.ilike(pattern)))
    if category_id:
        query = query.filter(Product.category_id == category_id)
    query = _filter_by_status(query, status)

    column = SORTABLE_COLUMNS.get(sort_by, Product.created_at)
    ordering = column.asc() if sort_order == "asc" else column.desc()

    total = query.count()
    products = query.order_by(ordering, Product.id.desc()).offset(page.offset).limit(page.limit).all()

    total_pages = (total + page.limit - 1) // page.limit
    pagination = {
        "currentPage": page.page,
        "totalPages": total_pages,
        "totalItems": total,
        "itemsPerPage": page.limit,
        "hasNextPage": page.page < total_pages,
        "hasPrevPage": page.page > 1,
    }
    return products, pagination


def get_product(business_id: int, product_id: int) -> Product:
    return get_owned_or_404(Product, product_id, business_id, "Product")


def low_stock_products(business_id: int) -> list[Product]:
    return (
        active_products(business_id)
        .filter(Product.current_stock < Product.min_stock_level)
        .order_by(Product.current_stock.asc(), Product.id.asc())
        .all()
    )


def out_of_stock_products(business_id: int) -> list[Product]:
    return active_products(business_id).filter(Product.current_stock == 0).order_by(Product.product_name).all()


def overstock_products(business_id: int) -> list[Product]:
    return (
        active_products(business_id)
        .filter(Product.current_stock > Product.max_stock_level)
        .order_by(Product.current_stock.desc(), Product.id.asc())
        .all()
    )


def _sku_taken(business_id: int, sku: str) -> bool:
    return scoped_query(Product, business_id).filter(Product.sku == sku).first() is not None


def _ensure_barcode_free(business_id: int, barcode: str | None, exclude_id: int | None = None) -> None:
    if not barcode:
        return
    query = active_products(business_id).filter(Product.barcode == barcode)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first() is not None:
        raise DuplicateError(DUPLICATE_BARCODE)


def _check_levels(min_level: int, max_level: int) -> None:
    if min_level > max_level:
        raise ValidationError("Minimum stock level cannot exceed maximum stock level")


def create_product(ctx: RequestContext, data: ProductInput) -> Product:
    get_owned_optional(Category, data.category_id, ctx.business_id, "Category")
    get_owned_optional(Supplier, data.supplier_id, ctx.business_id, "Supplier")

    if data.sku:
        if _sku_taken(ctx.business_id, data.sku):
            raise DuplicateError(DUPLICATE_SKU)
        sku = data.sku
    else:
        for _ in range(_SKU_ATTEMPTS):
            sku = generate_sku(data.product_name)
            if not _sku_taken(ctx.business_id, sku):
                break
        else:
            raise DuplicateError("Could not generate a unique SKU; please provide one")

    _ensure_barcode_free(ctx.business_id, data.barcode)

    min_level = data.min_stock_level
    if min_level is None:
        min_level = get_settings(ctx.business_id).low_stock_threshold_default
    max_level = data.max_stock_level if data.max_stock_level is not None else DEFAULT_MAX_STOCK_LEVEL
    _check_levels(min_level, max_level)

    product = Product(
        business_id=ctx.business_id,
        product_name=data.product_name,
        sku=sku,
        barcode=data.barcode,
        unit=data.unit,
        category_id=data.category_id,
        supplier_id=data.supplier_id,
        purchase_price=round_money(data.purchase_price),
        selling_price=round_money(data.selling_price),
        current_stock=data.current_stock,
        min_stock_level=min_level,
        max_stock_level=max_level,
        expiry_date=data.expiry_date,
        image_url=data.image_url,
        description=data.description,
        is_active=True,
    )
    db.session.add(product)
    try:
        db.session.flush()
        activity_service.record_activity(
            business_id=ctx.business_id,
            user_id=ctx.user_id,
            action="create",
            entity_type="product",
            entity_id=product.id,
            description=f"Product {product.product_name} ({product.sku}) created",
        )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateError(DUPLICATE_SKU)

    logger.info("Product created: %s (id=%s)", product.product_name, product.id)
    return product


def update_product(ctx: RequestContext, product_id: int, data: ProductUpdateInput) -> Product:
    product = get_product(ctx.business_id, product_id)
    changes = dict(data.changes)

    if "category_id" in changes:
        get_owned_optional(Category, changes["category_id"], ctx.business_id, "Category")
    if "supplier_id" in changes:
        get_owned_optional(Supplier, changes["supplier_id"], ctx.business_id, "Supplier")
    if changes.get("barcode"):
        _ensure_barcode_free(ctx.business_id, changes["barcode"], exclude_id=product.id)
    for money_column in ("purchase_price", "selling_price"):
        if money_column in changes:
            changes[money_column] = round_money(changes[money_column])

    _check_levels(
        changes.get("min_stock_level", product.min_stock_level),
        changes.get("max_stock_level", product.max_stock_level),
    )

    for column, value in changes.items():
        setattr(product, column, value)
    db.session.commit()
    logger.info("Product updated: %s", product.product_name)
    return product


def delete_product(ctx: RequestContext, product_id: int) -> Product:
    """Soft delete: the row stays for bill/purchase history."""
    product = get_product(ctx.business_id, product_id)
    product.is_active = False
    activity_service.record_activity(
        business_id=ctx.business_id,
        user_id=ctx.user_id,
        action="delete",
        entity_type="product",
        entity_id=product.id,
        description=f"Product {product.product_name} deactivated",
    )
    db.session.commit()
    return product


def adjust_stock(ctx: RequestContext, product_id: int, data: StockAdjustmentInput) -> StockAdjustment:
    """
    Manual stock correction.

    Always uses the atomic primitive; a decrease larger than the current
    stock is rejected rather than driving stock negative.
    """
    product = get_product(ctx.business_id, product_id)
    if not product.is_active:
        raise ValidationError("Cannot adjust stock of an inactive product")
    delta = -data.quantity if data.adjustment_type == ADJUSTMENT_DECREASE else data.quantity

    with WriteUnit("adjust stock") as unit:
        change = unit.step(
            "update stock",
            lambda: stock_service.apply_delta_atomic(
                business_id=ctx.business_id, product_id=product_id, delta=delta
            ),
            compensate=lambda applied: stock_service.apply_delta_atomic(
                business_id=ctx.business_id, product_id=product_id, delta=-applied.delta
            ),
        )
        adjustment = unit.step(
            "record adjustment",
            lambda: _insert_adjustment(ctx, product_id, data, change),
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
                action="adjust_stock",
                entity_type="product",
                entity_id=product_id,
                description=(
                    f"Stock {data.adjustment_type}d by {data.quantity} for {product.product_name} "
                    f"({data.reason}): {change.previous_stock} -> {change.new_stock}"
                ),
            ),
        )
    return adjustment


def _insert_adjustment(ctx: RequestContext, product_id: int, data: StockAdjustmentInput,
                       change: stock_service.StockChange) -> StockAdjustment:
    adjustment = StockAdjustment(
        business_id=ctx.business_id,
        product_id=product_id,
        adjustment_type=data.adjustment_type,
        quantity=data.quantity,
        reason=data.reason,
        notes=data.notes,
        previous_stock=change.previous_stock,
        new_stock=change.new_stock,
        created_by=ctx.user_id,
    )
    db.session.add(adjustment)
    return adjustment


def list_adjustments(business_id: int, product_id: int) -> list[StockAdjustment]:
    get_product(business_id, product_id)
    return (
        scoped_query(StockAdjustment, business_id)
        .filter(StockAdjustment.product_id == product_id)
        .order_by(StockAdjustment.created_at.desc(), StockAdjustment.id.desc())
        .all()
    )


# ---------------------------------------------------------------------------
# categories
# ---------------------------------------------------------------------------

def list_categories(business_id: int) -> list[dict]:
    rows = (
        db.session.query(Category, func.count(Product.id))
        .outerjoin(
            Product,
            (Product.category_id == Category.id) & Product.is_active.is_(True),
        )
        .filter(Category.business_id == business_id)
        .group_by(Category.id)
        .order_by(Category.category_name)
        .all()
    )
    result = []
    for category, product_count in rows:
        data = category.to_dict()
        data["product_count"] = product_count
        result.append(data)
    return result


def create_category(ctx: RequestContext, data: CategoryInput) -> Category:
    exists = (
        scoped_query(Category, ctx.business_id)
        .filter(func.lower(Category.category_name) == data.category_name.lower())
        .first()
    )
    if exists:
        raise DuplicateError("Category with this name already exists")
    category = Category(
        business_id=ctx.business_id,
        category_name=data.category_name,
        description=data.description,
    )
    db.session.add(category)
    db.session.commit()
    return category
