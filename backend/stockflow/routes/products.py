# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/stockflow/routes/products.py
"""
Product catalog routes.

MULTI-TENANT: All product operations are scoped to g.context.business_id
(set by @require_auth). A product of another business answers 404.

SECURITY: All routes require authentication.
- Delete requires the admin role
- current_stock is never writable through create/update payloads other than
  the initial stock on create; it moves through sales, purchases, barcode
  flows and stock adjustments only
"""
from flask import Blueprint, g, request

from ..constants import ROLE_ADMIN
from ..decorators import require_auth, require_role
from ..errors import StockFlowError
from ..responses import from_error, success
from ..schemas import Page, ProductInput, ProductUpdateInput, StockAdjustmentInput
from ..services import product_service

products_bp = Blueprint("products", __name__, url_prefix="/api/v1/products")


@products_bp.get("")
@require_auth
def list_products_route():
    """
    List active products.

    Query params:
    - page, limit (default 20, max 100)
    - search: matches product name or SKU
    - category: category id
    - status: low_stock | out_of_stock | overstock | in_stock
    - sortBy, sortOrder (asc | desc)
    """
    args = request.args
    try:
        page = Page.from_args(args)
        category_id = args.get("category", type=int)
        products, pagination = product_service.list_products(
            g.context.business_id,
            page=page,
            search=args.get("search"),
            category_id=category_id,
            status=args.get("status"),
            sort_by=args.get("sortBy", "created_at"),
            sort_order=args.get("sortOrder", "desc"),
        )
    except StockFlowError as exc:
        return from_error(exc)

    return success(
        "Products retrieved successfully",
        {"products": [product_service.product_payload(p) for p in products], "pagination": pagination},
    )


@products_bp.get("/low-stock")
@require_auth
def low_stock_route():
    products = product_service.low_stock_products(g.context.business_id)
    return success("Low stock products retrieved", [product_service.product_payload(p) for p in products])


@products_bp.get("/out-of-stock")
@require_auth
def out_of_stock_route():
    products = product_service.out_of_stock_products(g.context.business_id)
    return success("Out of stock products retrieved", [product_service.product_payload(p) for p in products])


@products_bp.get("/overstock")
@require_auth
def overstock_route():
    products = product_service.overstock_products(g.context.business_id)
    return success("Overstock products retrieved", [product_service.product_payload(p) for p in products])


@products_bp.get("/<int:product_id>")
@require_auth
def get_product_route(product_id: int):
    try:
        product = product_service.get_product(g.context.business_id, product_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Product retrieved successfully", product_service.product_payload(product))


@products_bp.post("")
@require_auth
def create_product_route():
    try:
        data = ProductInput.from_json(request.get_json(silent=True))
        product = product_service.create_product(g.context, data)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Product created successfully", product_service.product_payload(product), 201)


@products_bp.put("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    try:
        data = ProductUpdateInput.from_json(request.get_json(silent=True))
        product = product_service.update_product(g.context, product_id, data)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Product updated successfully", product_service.product_payload(product))


@products_bp.delete("/<int:product_id>")
@require_auth
@require_role(ROLE_ADMIN)
def delete_product_route(product_id: int):
    """Soft delete: the product is deactivated, history rows keep referencing it."""
    try:
        product_service.delete_product(g.context, product_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Product deleted successfully")


@products_bp.post("/<int:product_id>/adjust-stock")
@require_auth
def adjust_stock_route(product_id: int):
    try:
        data = StockAdjustmentInput.from_json(request.get_json(silent=True))
        adjustment = product_service.adjust_stock(g.context, product_id, data)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Stock adjusted successfully", adjustment.to_dict())


@products_bp.get("/<int:product_id>/adjustments")
@require_auth
def list_adjustments_route(product_id: int):
    try:
        adjustments = product_service.list_adjustments(g.context.business_id, product_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Stock adjustments retrieved", [a.to_dict() for a in adjustments])
