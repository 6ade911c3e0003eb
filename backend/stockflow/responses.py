# Overview: JSON response envelope helpers used by every route.

from flask import jsonify

from .errors import StockFlowError, WriteStepError


def success(message: str, data=None, status: int = 200):
    """Envelope: {success: true, message, data}."""
    return jsonify({"success": True, "message": message, "data": data}), status


def failure(message: str, status: int, error: str | None = None, details: dict | None = None):
    """Envelope: {success: false, message, error?, details?}."""
    body = {"success": False, "message": message, "data": None}
    if error:
        body["error"] = error
    if details:
        body["details"] = details
    return jsonify(body), status


def from_error(exc: StockFlowError):
    error = f"{exc.step} failed" if isinstance(exc, WriteStepError) else None
    return failure(exc.message, exc.status_code, error=error, details=exc.details or None)
