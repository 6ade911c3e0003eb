# Overview: Flask API routes for purchases (stock intake).

from flask import Blueprint, g, request

from ..constants import ROLE_ADMIN
from ..decorators import require_auth, require_role
from ..errors import StockFlowError
from ..responses import from_error, success
from ..schemas import DateRange, Page, PurchaseInput, PurchaseUpdateInput
from ..services import purchase_service

purchases_bp = Blueprint("purchases", __name__, url_prefix="/api/v1/purchases")


@purchases_bp.get("")
@require_auth
def list_purchases_route():
    args = request.args
    try:
        purchases, pagination = purchase_service.list_purchases(
            g.context.business_id,
            page=Page.from_args(args),
            search=args.get("search"),
            date_range=DateRange.from_args(args, required=False),
            payment_status=args.get("paymentStatus"),
            supplier_id=args.get("supplierId", type=int),
        )
    except StockFlowError as exc:
        return from_error(exc)
    return success("Purchases retrieved successfully", {"purchases": purchases, "pagination": pagination})


@purchases_bp.get("/<int:purchase_id>")
@require_auth
def get_purchase_route(purchase_id: int):
    try:
        purchase = purchase_service.get_purchase(g.context.business_id, purchase_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Purchase retrieved successfully", purchase.to_dict(include_items=True))


@purchases_bp.post("")
@require_auth
def create_purchase_route():
    try:
        data = PurchaseInput.from_json(request.get_json(silent=True))
        purchase, warnings = purchase_service.create_purchase(g.context, data)
    except StockFlowError as exc:
        return from_error(exc)

    payload = purchase.to_dict(include_items=True)
    if warnings:
        payload["warnings"] = warnings
    return success("Purchase created successfully", payload, 201)


@purchases_bp.put("/<int:purchase_id>")
@require_auth
def update_purchase_route(purchase_id: int):
    try:
        data = PurchaseUpdateInput.from_json(request.get_json(silent=True))
        purchase = purchase_service.update_purchase(g.context, purchase_id, data)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Purchase updated successfully", purchase.to_dict())


@purchases_bp.delete("/<int:purchase_id>")
@require_auth
@require_role(ROLE_ADMIN)
def delete_purchase_route(purchase_id: int):
    try:
        purchase_service.delete_purchase(g.context, purchase_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Purchase deleted successfully")
