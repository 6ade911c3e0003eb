# Overview: Flask API routes for business settings, profile and user management.

# backend/stockflow/routes/settings.py
"""
Settings routes.

SECURITY: Reading settings and the business profile is open to any
authenticated user; every write and all user management require admin.
"""
from flask import Blueprint, g, request

from ..constants import ROLE_ADMIN
from ..decorators import require_auth, require_role
from ..errors import StockFlowError
from ..extensions import db
from ..responses import from_error, success
from ..schemas import BusinessUpdateInput, ManagerInput, SettingsUpdateInput
from ..services import auth_service, settings_service

settings_bp = Blueprint("settings", __name__, url_prefix="/api/v1/settings")


@settings_bp.get("")
@require_auth
def get_settings_route():
    try:
        settings = settings_service.get_settings(g.context.business_id)
        db.session.commit()  # persists defaults created on first access
    except StockFlowError as exc:
        return from_error(exc)
    return success("Settings retrieved successfully", settings.to_dict())


@settings_bp.put("")
@require_auth
@require_role(ROLE_ADMIN)
def update_settings_route():
    try:
        data = SettingsUpdateInput.from_json(request.get_json(silent=True))
        settings = settings_service.update_settings(g.context.business_id, data)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Settings updated successfully", settings.to_dict())


@settings_bp.get("/business")
@require_auth
def get_business_route():
    try:
        business = settings_service.get_business(g.context.business_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Business profile retrieved successfully", business.to_dict())


@settings_bp.put("/business")
@require_auth
@require_role(ROLE_ADMIN)
def update_business_route():
    try:
        data = BusinessUpdateInput.from_json(request.get_json(silent=True))
        business = settings_service.update_business(g.context.business_id, data)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Business profile updated successfully", business.to_dict())


@settings_bp.get("/users")
@require_auth
@require_role(ROLE_ADMIN)
def list_users_route():
    users = auth_service.list_users(g.context)
    return success("Users retrieved successfully", [user.to_dict() for user in users])


@settings_bp.post("/users")
@require_auth
@require_role(ROLE_ADMIN)
def add_manager_route():
    try:
        data = ManagerInput.from_json(request.get_json(silent=True))
        user = auth_service.add_manager(g.context, data)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Manager added successfully", user.to_dict(), 201)


@settings_bp.put("/users/<int:user_id>/deactivate")
@require_auth
@require_role(ROLE_ADMIN)
def deactivate_user_route(user_id: int):
    try:
        user = auth_service.deactivate_user(g.context, user_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("User deactivated successfully", user.to_dict())
