# Overview: Service-layer operations for checkout; payment, order, lines and table settlement.

"""
Checkout / Settlement Service

A checkout writes, in ONE transaction:
- a Payment (sequence-allocated number, amount, method, branch)
- a completed "direct" Order for the same amount, linked from the payment
- one OrderLine per cart line
- when a table is given: the table's running total, status "closed" and closed_at

Any failure rolls every statement back, so an error response never leaves
a payment without its order or an order with a subset of its lines.

IDEMPOTENCY:
- Without an idempotency key, each call records a new payment and order.
- With a key, a repeated call returns the originally recorded ids and
  writes nothing.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Order, Payment
from ..models.orders import (
    ORDER_KIND_DIRECT,
    ORDER_STATUS_COMPLETED,
    PAYMENT_METHOD_CARD,
    PAYMENT_METHOD_CASH,
    PAYMENT_METHOD_HOUSE_ACCOUNT,
    PAYMENT_METHODS,
)
from ..validation import ValidationError, parse_cart, to_cents, to_text
from cafepos.time_utils import utcnow
from .auth_service import resolve_user_branch
from .concurrency import run_with_retry
from .document_service import DOCUMENT_PAYMENT, next_document_number
from .order_service import ensure_products_exist, write_order
from .table_service import get_table, settle_table

# Client-facing aliases for the stored method names
PAYMENT_METHOD_ALIASES = {
    "customer": PAYMENT_METHOD_HOUSE_ACCOUNT,
    "house-account": PAYMENT_METHOD_HOUSE_ACCOUNT,
    "nakit": PAYMENT_METHOD_CASH,
    "kart": PAYMENT_METHOD_CARD,
    "mudavim": PAYMENT_METHOD_HOUSE_ACCOUNT,
}


@dataclass(frozen=True)
class CheckoutResult:
    payment: Payment
    order: Order
    duplicate: bool = False


def normalize_payment_method(value) -> str:
    """Map a client payment method to a stored one; absent means cash."""
    if value is None or value == "":
        return PAYMENT_METHOD_CASH
    method = str(value).strip().lower()
    method = PAYMENT_METHOD_ALIASES.get(method, method)
    if method not in PAYMENT_METHODS:
        raise ValidationError(f"Invalid payment method: {value}. Must be one of {list(PAYMENT_METHODS)}")
    return method


def _find_by_idempotency_key(key: str) -> CheckoutResult | None:
    payment = db.session.query(Payment).filter_by(idempotency_key=key).first()
    if payment is None:
        return None
    return CheckoutResult(payment=payment, order=payment.order, duplicate=True)


def checkout(
    *,
    items,
    amount,
    payment_method,
    user_id,
    table_id=None,
    idempotency_key=None,
) -> CheckoutResult:
    """
    Record a direct payment and its completed order, settling a table if given.

    Raises:
        ValidationError: invalid cart, amount, method or missing userId (before any write)
        NotFoundError: unknown user, table or product (before any write)
    """
    lines = parse_cart(items)
    amount_cents = to_cents(amount, "amount", allow_zero=False)
    method = normalize_payment_method(payment_method)
    key = to_text(idempotency_key, "idempotencyKey", max_length=128, required=False)

    def _op():
        if key:
            existing = _find_by_idempotency_key(key)
            if existing is not None:
                current_app.logger.info("Checkout replay for idempotency key %r -> payment %s", key, existing.payment.id)
                return existing

        user, branch = resolve_user_branch(user_id)
        ensure_products_exist(lines)

        table = None
        if table_id is not None and table_id != "":
            table = get_table(table_id, lock=True)

        payment = Payment(
            payment_number=next_document_number(branch_id=branch.id, document_type=DOCUMENT_PAYMENT),
            table_id=table.id if table else None,
            amount_cents=amount_cents,
            method=method,
            branch_id=branch.id,
            created_by_user_id=user.id,
            idempotency_key=key,
            paid_at=utcnow(),
        )
        db.session.add(payment)
        db.session.flush()  # Get payment ID

        order = write_order(
            branch_id=branch.id,
            user_id=user.id,
            table_id=table.id if table else None,
            lines=lines,
            total_cents=amount_cents,
            status=ORDER_STATUS_COMPLETED,
            kind=ORDER_KIND_DIRECT,
        )
        payment.order_id = order.id

        if table is not None:
            settle_table(table, amount_cents)

        db.session.commit()
        current_app.logger.info(
            "Checkout %s / %s recorded: amount_cents=%d method=%s table=%s",
            payment.payment_number, order.order_number, amount_cents, method, payment.table_id,
        )
        return CheckoutResult(payment=payment, order=order)

    # IntegrityError covers a concurrent first use of the same idempotency key
    # or sequence row; the retry then finds the committed row.
    return run_with_retry(_op, retry_on=(IntegrityError,))


def list_recent_payments(*, branch_id: int | None = None, limit: int = 10) -> list[Payment]:
    query = db.session.query(Payment)
    if branch_id is not None:
        query = query.filter(Payment.branch_id == branch_id)
    return query.order_by(Payment.paid_at.desc(), Payment.id.desc()).limit(limit).all()
