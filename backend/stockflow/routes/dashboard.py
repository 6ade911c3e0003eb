# Overview: Flask API routes for dashboard aggregates.

from flask import Blueprint, g, request

from ..decorators import require_auth
from ..responses import success
from ..services import dashboard_service

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/v1/dashboard")


@dashboard_bp.get("/metrics")
@require_auth
def metrics_route():
    return success("Dashboard metrics retrieved successfully", dashboard_service.metrics(g.context.business_id))


@dashboard_bp.get("/activities")
@dashboard_bp.get("/recent-activities")
@require_auth
def activities_route():
    limit = max(1, min(request.args.get("limit", 10, type=int), 100))
    return success("Activities retrieved successfully", dashboard_service.activities(g.context.business_id, limit))


@dashboard_bp.get("/sales-chart")
@require_auth
def sales_chart_route():
    days = max(1, min(request.args.get("days", 7, type=int), 366))
    return success("Sales chart data retrieved successfully", dashboard_service.sales_chart(g.context.business_id, days))
