# Overview: Flask API routes for table orders; parses input and returns JSON responses.

from flask import Blueprint, request

from ..decorators import api_errors, success
from ..services import order_service
from ..validation import from_cents

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.post("")
@api_errors("Order could not be created")
def create_order_route():
    """
    Add items to a table tab as a pending order.

    Request body:
    {
        "items": [{"id": 2, "name": "Latte", "price": 30, "quantity": 1}],
        "tableId": 12,  (optional)
        "userId": 7
    }

    Returns:
        200: {orderId, orderNumber, totalAmount}
        400: Invalid cart or missing userId
        404: Unknown user or table
        409: Table already closed
    """
    data = request.get_json(silent=True) or {}
    order = order_service.create_table_order(
        items=data.get("items"),
        user_id=data.get("userId"),
        table_id=data.get("tableId"),
    )
    return success({
        "orderId": order.id,
        "orderNumber": order.order_number,
        "totalAmount": from_cents(order.total_cents),
    })


@orders_bp.get("/table/<int:table_id>")
@api_errors("Table orders could not be loaded")
def list_table_orders_route(table_id: int):
    """Orders of a table that are not completed, each with its lines."""
    orders = order_service.list_open_table_orders(table_id)
    return success({"orders": [o.to_dict(include_lines=True) for o in orders]})


@orders_bp.get("/<int:order_id>")
@api_errors("Order could not be loaded")
def get_order_route(order_id: int):
    order = order_service.get_order(order_id)
    data = order.to_dict(include_lines=True)
    data["payments"] = [p.to_dict() for p in order.payments]
    return success({"order": data})


@orders_bp.put("/<int:order_id>/status")
@api_errors("Order status could not be updated")
def update_order_status_route(order_id: int):
    data = request.get_json(silent=True) or {}
    order_service.update_order_status(order_id, data.get("status"))
    return success()
