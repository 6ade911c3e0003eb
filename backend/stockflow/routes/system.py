# backend/stockflow/routes/system.py
"""
System health endpoint.

Reports database connectivity and latency for deployment checks. Does not
require authentication and exposes no tenant data.
"""

import time

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..responses import failure, success
from stockflow.time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api/v1")


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except SQLAlchemyError:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {"status": "unhealthy", "latency_ms": round(elapsed_ms, 2), "error": "Database error"}


@system_bp.get("/health")
def health():
    database = check_database_health()
    body = {
        "status": "ok" if database["status"] == "healthy" else "degraded",
        "timestamp": to_utc_z(utcnow()),
        "write_mode": current_app.config["STOCKFLOW_WRITE_MODE"],
        "database": database,
    }
    if database["status"] != "healthy":
        return failure("Service degraded", 503, details=body)
    return success("StockFlow API is running", body)
