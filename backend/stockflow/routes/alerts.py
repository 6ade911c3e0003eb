# Overview: Flask API routes for stock alerts.

from flask import Blueprint, g, request

from ..constants import ALERT_TYPES
from ..decorators import require_auth
from ..errors import StockFlowError, ValidationError
from ..responses import from_error, success
from ..services import alert_service

alerts_bp = Blueprint("alerts", __name__, url_prefix="/api/v1/alerts")


@alerts_bp.get("")
@require_auth
def list_alerts_route():
    """
    Query params:
    - isRead: true | false
    - alertType: low_stock | out_of_stock | overstock
    """
    is_read_arg = request.args.get("isRead")
    alert_type = request.args.get("alertType")
    try:
        if alert_type and alert_type not in ALERT_TYPES:
            raise ValidationError(f"alertType must be one of: {', '.join(ALERT_TYPES)}")
        is_read = None if is_read_arg is None else is_read_arg.lower() == "true"
        alerts = alert_service.list_alerts(g.context.business_id, is_read=is_read, alert_type=alert_type)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Alerts retrieved successfully", [alert.to_dict() for alert in alerts])


@alerts_bp.put("/<int:alert_id>/read")
@require_auth
def mark_read_route(alert_id: int):
    try:
        alert = alert_service.mark_read(g.context.business_id, alert_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Alert marked as read", alert.to_dict())


@alerts_bp.put("/<int:alert_id>/resolve")
@require_auth
def resolve_route(alert_id: int):
    try:
        alert = alert_service.mark_resolved(g.context.business_id, alert_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Alert resolved", alert.to_dict())


@alerts_bp.delete("/<int:alert_id>")
@require_auth
def delete_alert_route(alert_id: int):
    try:
        alert_service.delete_alert(g.context.business_id, alert_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Alert deleted successfully")
