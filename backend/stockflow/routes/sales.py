# Overview: Flask API routes for sales (bills); parses input and returns JSON responses.

# backend/stockflow/routes/sales.py
"""
Sales routes.

Registered twice: /api/v1/sales and the legacy /api/v1/bills path.

POST creates a bill with items, stock decrements, payment, customer total,
alerts and activity (see services/sale_service.py). In compensating write
mode, side effects that failed are listed under data.warnings.

SECURITY: All routes require authentication; delete requires admin.
"""
from flask import Blueprint, g, request

from ..constants import ROLE_ADMIN
from ..decorators import require_auth, require_role
from ..errors import StockFlowError
from ..responses import from_error, success
from ..schemas import DateRange, Page, SaleInput, SaleUpdateInput
from ..services import sale_service

sales_bp = Blueprint("sales", __name__, url_prefix="/api/v1/sales")


@sales_bp.get("")
@require_auth
def list_bills_route():
    """
    Query params:
    - page, limit
    - search: bill number or customer name
    - startDate, endDate (YYYY-MM-DD, both or neither)
    - paymentStatus: paid | pending | partial
    """
    args = request.args
    try:
        bills, pagination = sale_service.list_bills(
            g.context.business_id,
            page=Page.from_args(args),
            search=args.get("search"),
            date_range=DateRange.from_args(args, required=False),
            payment_status=args.get("paymentStatus"),
        )
    except StockFlowError as exc:
        return from_error(exc)

    return success(
        "Bills retrieved successfully",
        {"bills": [bill.to_dict() for bill in bills], "pagination": pagination},
    )


@sales_bp.get("/<int:bill_id>")
@require_auth
def get_bill_route(bill_id: int):
    try:
        bill = sale_service.get_bill(g.context.business_id, bill_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Bill retrieved successfully", sale_service.bill_detail(bill))


@sales_bp.post("")
@require_auth
def create_bill_route():
    try:
        data = SaleInput.from_json(request.get_json(silent=True))
        bill, warnings = sale_service.create_bill(g.context, data)
    except StockFlowError as exc:
        return from_error(exc)

    payload = {"bill": bill.to_dict(include_items=True)}
    if warnings:
        payload["warnings"] = warnings
    return success("Bill created successfully", payload, 201)


@sales_bp.put("/<int:bill_id>")
@require_auth
def update_bill_route(bill_id: int):
    try:
        data = SaleUpdateInput.from_json(request.get_json(silent=True))
        bill = sale_service.update_bill(g.context, bill_id, data)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Bill updated successfully", bill.to_dict())


@sales_bp.delete("/<int:bill_id>")
@require_auth
@require_role(ROLE_ADMIN)
def delete_bill_route(bill_id: int):
    """Deleting a bill does not return its quantities to stock."""
    try:
        sale_service.delete_bill(g.context, bill_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Bill deleted successfully")
