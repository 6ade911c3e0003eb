# Overview: Flask API routes for product categories.

from flask import Blueprint, g, request

from ..decorators import require_auth
from ..errors import StockFlowError
from ..responses import from_error, success
from ..schemas import CategoryInput
from ..services import product_service

categories_bp = Blueprint("categories", __name__, url_prefix="/api/v1/categories")


@categories_bp.get("")
@require_auth
def list_categories_route():
    """Categories with the number of active products in each."""
    return success("Categories retrieved successfully", product_service.list_categories(g.context.business_id))


@categories_bp.post("")
@require_auth
def create_category_route():
    try:
        data = CategoryInput.from_json(request.get_json(silent=True))
        category = product_service.create_category(g.context, data)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Category created successfully", category.to_dict(), 201)
