# Overview: Flask API routes for reports.

from flask import Blueprint, g, request

from ..constants import ROLE_ADMIN
from ..decorators import require_auth, require_role
from ..errors import StockFlowError
from ..responses import from_error, success
from ..schemas import DateRange
from ..services import report_service

reports_bp = Blueprint("reports", __name__, url_prefix="/api/v1/reports")


@reports_bp.get("/stock-summary")
@require_auth
def stock_summary_route():
    return success("Stock summary retrieved successfully", report_service.stock_summary(g.context.business_id))


@reports_bp.get("/sales")
@require_auth
def sales_report_route():
    try:
        report = report_service.sales_report(g.context.business_id, DateRange.from_args(request.args))
    except StockFlowError as exc:
        return from_error(exc)
    return success("Sales report retrieved successfully", report)


@reports_bp.get("/purchases")
@require_auth
def purchase_report_route():
    try:
        report = report_service.purchase_report(g.context.business_id, DateRange.from_args(request.args))
    except StockFlowError as exc:
        return from_error(exc)
    return success("Purchase report retrieved successfully", report)


@reports_bp.get("/profit-loss")
@require_auth
@require_role(ROLE_ADMIN)
def profit_loss_route():
    try:
        report = report_service.profit_loss(g.context.business_id, DateRange.from_args(request.args))
    except StockFlowError as exc:
        return from_error(exc)
    return success("Profit/Loss report retrieved successfully", report)
