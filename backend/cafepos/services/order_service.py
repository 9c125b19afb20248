# Overview: Service-layer operations for orders; table orders, order reads and status updates.

"""
Order Service

Table orders add items to an open tab: one pending order of kind "table",
one line per cart line, and the order total accrued onto the table's
running total. No payment is taken here; the tab is settled later through
payment_service.checkout.

Every write path runs as a single transaction (see concurrency.run_with_retry).
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Order, OrderLine, Product
from ..models.orders import ORDER_KIND_TABLE, ORDER_STATUS_COMPLETED, ORDER_STATUS_PENDING
from ..models.tables import TABLE_STATUS_CLOSED
from ..validation import CartLine, ConflictError, NotFoundError, parse_cart, to_text
from cafepos.time_utils import utcnow
from .auth_service import resolve_user_branch
from .concurrency import lock_for_update, run_with_retry
from .document_service import DOCUMENT_ORDER, next_document_number
from .table_service import accrue_table_order, get_table


def cart_total_cents(lines: list[CartLine]) -> int:
    return sum(line.line_total_cents for line in lines)


def ensure_products_exist(lines: list[CartLine]) -> None:
    """Reject a cart that references a product id missing from the catalog."""
    product_ids = {line.product_id for line in lines if line.product_id is not None}
    if not product_ids:
        return
    found = {row.id for row in db.session.query(Product.id).filter(Product.id.in_(product_ids))}
    missing = sorted(product_ids - found)
    if missing:
        raise NotFoundError(f"Product {missing[0]} not found")


def write_order(
    *,
    branch_id: int,
    user_id: int | None,
    table_id: int | None,
    lines: list[CartLine],
    total_cents: int,
    status: str,
    kind: str,
) -> Order:
    """
    Insert an order and its lines. Does not commit.

    The product name and unit price are copied from the cart line so later
    catalog edits never change a historical receipt.
    """
    now = utcnow()
    order = Order(
        order_number=next_document_number(branch_id=branch_id, document_type=DOCUMENT_ORDER),
        table_id=table_id,
        total_cents=total_cents,
        amount_due_cents=total_cents,
        status=status,
        kind=kind,
        branch_id=branch_id,
        created_by_user_id=user_id,
        created_at=now,
        updated_at=now,
    )
    db.session.add(order)
    db.session.flush()  # Get order ID

    for line in lines:
        db.session.add(OrderLine(
            order_id=order.id,
            product_id=line.product_id,
            product_name=line.name,
            quantity=line.quantity,
            unit_price_cents=line.unit_price_cents,
            line_total_cents=line.line_total_cents,
        ))
    db.session.flush()
    return order


def create_table_order(*, items, user_id, table_id=None) -> Order:
    """
    Record a pending table order.

    Raises:
        ValidationError: invalid cart or missing userId (before any write)
        NotFoundError: unknown user, table or product (before any write)
        ConflictError: the table is already closed
    """
    lines = parse_cart(items)
    total_cents = cart_total_cents(lines)

    def _op():
        user, branch = resolve_user_branch(user_id)
        ensure_products_exist(lines)

        table = None
        if table_id is not None and table_id != "":
            table = get_table(table_id, lock=True)
            if table.status == TABLE_STATUS_CLOSED:
                raise ConflictError(f"Table {table.id} is closed")

        order = write_order(
            branch_id=branch.id,
            user_id=user.id,
            table_id=table.id if table else None,
            lines=lines,
            total_cents=total_cents,
            status=ORDER_STATUS_PENDING,
            kind=ORDER_KIND_TABLE,
        )

        if table is not None:
            accrue_table_order(table, total_cents)

        db.session.commit()
        current_app.logger.info(
            "Order %s recorded for table %s: %d lines, total_cents=%d",
            order.order_number, order.table_id, len(lines), total_cents,
        )
        return order

    return run_with_retry(_op, retry_on=(IntegrityError,))


def get_order(order_id: int) -> Order:
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order


def list_open_table_orders(table_id) -> list[Order]:
    """Orders of a table that are not completed yet, newest first."""
    table = get_table(table_id)
    return (
        db.session.query(Order)
        .filter(Order.table_id == table.id, Order.status != ORDER_STATUS_COMPLETED)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def update_order_status(order_id: int, status) -> Order:
    """Set a free-text status on an order."""
    status = to_text(status, "status", max_length=32)

    def _op():
        order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
        if order is None:
            raise NotFoundError("Order not found")
        order.status = status
        order.updated_at = utcnow()
        db.session.commit()
        return order

    return run_with_retry(_op)
