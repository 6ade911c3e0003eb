# Overview: Flask API routes for barcode lookup, scan-to-buy and scan-to-sell.

from flask import Blueprint, g, request

from ..decorators import require_auth
from ..errors import StockFlowError
from ..responses import from_error, success
from ..schemas import BarcodePurchaseInput, BarcodeSaleInput
from ..services import barcode_service, product_service

barcode_bp = Blueprint("barcode", __name__, url_prefix="/api/v1/barcode")


@barcode_bp.get("/lookup/<string:barcode>")
@barcode_bp.get("/product/<string:barcode>")
@require_auth
def lookup_route(barcode: str):
    try:
        product = barcode_service.lookup(g.context.business_id, barcode.strip())
    except StockFlowError as exc:
        return from_error(exc)
    return success("Product found", product_service.product_payload(product))


@barcode_bp.post("/purchase")
@require_auth
def barcode_purchase_route():
    try:
        data = BarcodePurchaseInput.from_json(request.get_json(silent=True))
        result = barcode_service.barcode_purchase(g.context, data)
    except StockFlowError as exc:
        return from_error(exc)
    if not result["warnings"]:
        del result["warnings"]
    return success("Purchase recorded successfully", result, 201)


@barcode_bp.post("/sale")
@require_auth
def barcode_sale_route():
    try:
        data = BarcodeSaleInput.from_json(request.get_json(silent=True))
        result = barcode_service.barcode_sale(g.context, data)
    except StockFlowError as exc:
        return from_error(exc)
    if not result["warnings"]:
        del result["warnings"]
    return success("Sale completed successfully", result, 201)
