# backend/backoffice/routes/reports.py
"""
Dashboard and analytics. Read-only; figures are recomputed per request.
"""
from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_permission
from ..services import reporting_service
from ..time_utils import parse_iso_date


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
@require_auth
@require_permission("VIEW_DASHBOARD")
def dashboard_route():
    """Query params: date (YYYY-MM-DD, optional; defaults to today UTC)."""
    try:
        day = parse_iso_date(request.args.get("date"))
    except ValueError:
        return jsonify({"error": "date must be an ISO-8601 date (YYYY-MM-DD)"}), 400
    return jsonify(reporting_service.dashboard_metrics(today=day)), 200


@reports_bp.get("/region-success")
@require_auth
@require_permission("VIEW_ANALYTICS")
def region_success_route():
    rates = reporting_service.region_success_rates()
    return jsonify({"items": rates, "count": len(rates)}), 200
