# Overview: Flask API routes for table tabs; parses input and returns JSON responses.

"""
Table API Routes

Lifecycle: open -> (reserved) -> closed. Closing is a status flip, rows are
never deleted. Settlement through POST /api/payments also closes the table.
"""

from flask import Blueprint, request

from ..decorators import api_errors, success
from ..services import table_service
from ..validation import ValidationError
from cafepos.time_utils import parse_date, utcnow

tables_bp = Blueprint("tables", __name__, url_prefix="/api/tables")


@tables_bp.get("")
@api_errors("Tables could not be loaded")
def list_active_tables_route():
    """
    Open and reserved tables.

    Query params:
    - userId: restrict to that user's branch
    """
    user_id = request.args.get("userId", type=int)
    tables = table_service.list_active_tables(user_id=user_id)
    return success({"tables": [t.to_dict() for t in tables]})


@tables_bp.get("/all")
@api_errors("Tables could not be loaded")
def list_all_tables_route():
    return success({"tables": [t.to_dict() for t in table_service.list_all_tables()]})


@tables_bp.get("/closed")
@api_errors("Closed tables could not be loaded")
def list_closed_tables_route():
    """
    Payments of one day presented as closed tabs.

    Query params:
    - date: YYYY-MM-DD (default: today, UTC)
    - subeId: branch filter (optional)
    """
    raw_date = request.args.get("date")
    try:
        day = parse_date(raw_date) or utcnow().date()
    except ValueError:
        raise ValidationError("date must be a YYYY-MM-DD date")
    branch_id = request.args.get("subeId", type=int) or request.args.get("branchId", type=int)
    return success({"tables": table_service.list_closed_tabs(day=day, branch_id=branch_id)})


@tables_bp.get("/<int:table_id>")
@api_errors("Table could not be loaded")
def get_table_route(table_id: int):
    table = table_service.get_table(table_id)
    return success({"table": table.to_dict()})


@tables_bp.post("/open")
@api_errors("Table could not be opened")
def open_table_route():
    """
    Open a table in the user's branch.

    Request body: {"tableName": "T1", "userId": 7}

    Returns:
        200: {tableId, tableName, branchId, branchName}
        400: Missing tableName or userId
        404: Unknown user
    """
    data = request.get_json(silent=True) or {}
    table = table_service.open_table(table_name=data.get("tableName"), user_id=data.get("userId"))
    return success({
        "tableId": table.id,
        "tableName": table.name,
        "branchId": table.branch_id,
        "branchName": table.branch.name if table.branch else None,
    })


@tables_bp.post("/close")
@api_errors("Table could not be closed")
def close_table_route():
    data = request.get_json(silent=True) or {}
    table = table_service.close_table(data.get("tableId"))
    return success({"tableId": table.id})


@tables_bp.post("/reserve")
@api_errors("Table could not be reserved")
def reserve_table_route():
    data = request.get_json(silent=True) or {}
    table = table_service.reserve_table(data.get("tableId"))
    return success({"tableId": table.id})
