# Overview: Flask API routes for checkout and payment listings.

"""
Payment API Routes

POST /api/payments is the checkout: it records the payment, a completed
order with its lines, and settles the table when one is given, all in one
transaction.
"""

from flask import Blueprint, current_app, request

from ..decorators import api_errors, success
from ..services import payment_service

payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


@payments_bp.post("")
@api_errors("Payment could not be recorded")
def checkout_route():
    """
    Check out a cart.

    Request body:
    {
        "items": [{"id": 1, "name": "Espresso", "price": 25, "quantity": 2}],
        "amount": 50,
        "tableId": 12,  (optional, settles and closes the table)
        "paymentMethod": "cash" | "card" | "house_account",
        "userId": 7,
        "idempotencyKey": "..."  (optional, also read from the Idempotency-Key header)
    }

    Returns:
        200: {paymentId, orderId, paymentNumber, orderNumber, duplicate}
        400: Invalid cart, amount or payment method, missing userId
        404: Unknown user or table
    """
    data = request.get_json(silent=True) or {}
    result = payment_service.checkout(
        items=data.get("items"),
        amount=data.get("amount"),
        payment_method=data.get("paymentMethod"),
        user_id=data.get("userId"),
        table_id=data.get("tableId"),
        idempotency_key=data.get("idempotencyKey") or request.headers.get("Idempotency-Key"),
    )
    return success({
        "paymentId": result.payment.id,
        "orderId": result.order.id if result.order else None,
        "paymentNumber": result.payment.payment_number,
        "orderNumber": result.order.order_number if result.order else None,
        "duplicate": result.duplicate,
    })


@payments_bp.get("")
@api_errors("Payments could not be loaded")
def list_payments_route():
    """
    Latest payments.

    Query params:
    - subeId: branch filter (optional)
    """
    branch_id = request.args.get("subeId", type=int) or request.args.get("branchId", type=int)
    limit = current_app.config.get("RECENT_PAYMENTS_LIMIT", 10)
    payments = payment_service.list_recent_payments(branch_id=branch_id, limit=limit)
    return success({"payments": [p.to_dict() for p in payments]})
