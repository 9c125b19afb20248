# Overview: Flask API routes for the dashboard and the revenue/sales reports.

from flask import Blueprint, request

from ..decorators import api_errors, success
from ..services import reporting_service
from ..validation import ValidationError

reports_bp = Blueprint("reports", __name__, url_prefix="/api")


def _branch_arg():
    return request.args.get("subeId", type=int) or request.args.get("branchId", type=int)


@reports_bp.get("/dashboard")
@api_errors("Dashboard could not be loaded")
def dashboard_route():
    """
    Sales overview of one branch.

    Query params:
    - subeId: branch id (required)
    """
    branch_id = _branch_arg()
    if branch_id is None:
        raise ValidationError("subeId is required")
    return success({"dashboard": reporting_service.dashboard(branch_id=branch_id)})


@reports_bp.get("/reports/revenue")
@api_errors("Revenue report could not be generated")
def revenue_report_route():
    """
    Revenue between two inclusive dates.

    Query params:
    - startDate, endDate: YYYY-MM-DD (required)
    - subeId: branch filter (optional)
    """
    report = reporting_service.revenue_report(
        start=request.args.get("startDate"),
        end=request.args.get("endDate"),
        branch_id=_branch_arg(),
    )
    return success({"report": report})


@reports_bp.get("/reports/sales")
@api_errors("Sales report could not be generated")
def sales_report_route():
    report = reporting_service.sales_report(
        start=request.args.get("startDate"),
        end=request.args.get("endDate"),
        branch_id=_branch_arg(),
    )
    return success({"report": report})
