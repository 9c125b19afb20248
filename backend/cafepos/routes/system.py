# backend/cafepos/routes/system.py
"""
System health endpoint.

Reports database connectivity so the frontend and load balancers can tell a
running API from a usable one.
"""

import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from ..extensions import db
from cafepos.time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity with a trivial query.

    Returns dict with status and latency.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "connected", "latency_ms": round(elapsed_ms, 2)}
    except Exception:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {"status": "disconnected", "latency_ms": round(elapsed_ms, 2)}


@system_bp.get("/api/health")
def health_route():
    database = check_database_health()
    healthy = database["status"] == "connected"
    return jsonify({
        "success": healthy,
        "status": "OK" if healthy else "DEGRADED",
        "timestamp": to_utc_z(utcnow()),
        "database": database,
    }), 200 if healthy else 503
