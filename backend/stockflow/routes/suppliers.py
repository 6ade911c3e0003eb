# Overview: Flask API routes for the supplier registry.

from flask import Blueprint, g, request

from ..decorators import require_auth
from ..errors import StockFlowError
from ..responses import from_error, success
from ..schemas import SupplierInput, SupplierUpdateInput
from ..services import supplier_service

suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/v1/suppliers")


@suppliers_bp.get("")
@require_auth
def list_suppliers_route():
    suppliers = supplier_service.list_suppliers(g.context.business_id, search=request.args.get("search"))
    return success("Suppliers retrieved successfully", [s.to_dict() for s in suppliers])


@suppliers_bp.get("/<int:supplier_id>")
@require_auth
def get_supplier_route(supplier_id: int):
    try:
        supplier = supplier_service.get_supplier(g.context.business_id, supplier_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Supplier retrieved successfully", supplier.to_dict())


@suppliers_bp.post("")
@require_auth
def create_supplier_route():
    try:
        data = SupplierInput.from_json(request.get_json(silent=True))
        supplier = supplier_service.create_supplier(g.context, data)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Supplier created successfully", supplier.to_dict(), 201)


@suppliers_bp.put("/<int:supplier_id>")
@require_auth
def update_supplier_route(supplier_id: int):
    try:
        data = SupplierUpdateInput.from_json(request.get_json(silent=True))
        supplier = supplier_service.update_supplier(g.context, supplier_id, data)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Supplier updated successfully", supplier.to_dict())


@suppliers_bp.delete("/<int:supplier_id>")
@require_auth
def delete_supplier_route(supplier_id: int):
    try:
        supplier_service.delete_supplier(g.context, supplier_id)
    except StockFlowError as exc:
        return from_error(exc)
    return success("Supplier deleted successfully")
