# Overview: Flask API routes for the customer registry.

from flask import Blueprint, g, request

from ..decorators import require_auth
from ..errors import StockFlowError
from ..responses import from_error, success
from ..schemas import CustomerInput, CustomerUpdateInput
from ..services import customer_service

customers_bp = Blueprint("customers", __name__, url_prefix="/api/v1/customers")


@customers_bp.get("")
@require_auth
def list_customers_route():
    customers = customer_service.list_customers(g.context.business_id, search=request.args.get("search"))
    return success("Customers retrieved successfully", [c.to_dict() for c in customers])


@customers_bp.get("/<int:customer_id>")
@require_auth
def get_customer_route(customer_id: int):
    """Customer with their 20 most recent bills."""
    try:
        detail = customer_service.customer_detail(g.context.business_id, customer_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Customer retrieved successfully", detail)


@customers_bp.post("")
@require_auth
def create_customer_route():
    try:
        data = CustomerInput.from_json(request.get_json(silent=True))
        customer = customer_service.create_customer(g.context, data)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Customer created successfully", customer.to_dict(), 201)


@customers_bp.put("/<int:customer_id>")
@require_auth
def update_customer_route(customer_id: int):
    try:
        data = CustomerUpdateInput.from_json(request.get_json(silent=True))
        customer = customer_service.update_customer(g.context, customer_id, data)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Customer updated successfully", customer.to_dict())


@customers_bp.delete("/<int:customer_id>")
@require_auth
def delete_customer_route(customer_id: int):
    try:
        customer_service.delete_customer(g.context, customer_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Customer deleted successfully")
