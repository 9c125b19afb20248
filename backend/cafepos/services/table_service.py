# Overview: Service-layer operations for table tabs; open, reserve, close and settle.

from __future__ import annotations

from datetime import date

from flask import current_app

from ..extensions import db
from ..models import Payment, Table
from ..models.tables import TABLE_STATUS_CLOSED, TABLE_STATUS_OPEN, TABLE_STATUS_RESERVED
from ..validation import MAX_PRICE_CENTS, NotFoundError, ValidationError, from_cents, to_int, to_text
from cafepos.time_utils import day_bounds, utcnow, to_utc_z
from .auth_service import resolve_user_branch
from .concurrency import lock_for_update, run_with_retry

SETTLEMENT_ACCUMULATE = "accumulate"
SETTLEMENT_REPLACE = "replace"

SETTLEMENT_MODES = (SETTLEMENT_ACCUMULATE, SETTLEMENT_REPLACE)


def _parse_table_id(table_id) -> int:
    if table_id is None or table_id == "":
        raise ValidationError("tableId is required")
    return to_int(table_id, "tableId", minimum=1)


def get_table(table_id, *, lock: bool = False) -> Table:
    query = db.session.query(Table).filter_by(id=_parse_table_id(table_id))
    if lock:
        query = lock_for_update(query)
    table = query.first()
    if table is None:
        raise NotFoundError("Table not found")
    return table


def open_table(*, table_name, user_id) -> Table:
    """Open a new tab in the user's branch with a zero running total."""
    name = to_text(table_name, "tableName", max_length=64)

    def _op():
        user, branch = resolve_user_branch(user_id)
        now = utcnow()
        table = Table(
            name=name,
            status=TABLE_STATUS_OPEN,
            opened_at=now,
            total_cents=0,
            opened_by_user_id=user.id,
            branch_id=branch.id,
            updated_at=now,
        )
        db.session.add(table)
        db.session.commit()
        current_app.logger.info("Table %s (%r) opened in branch %s by user %s", table.id, name, branch.id, user.id)
        return table

    return run_with_retry(_op)


def reserve_table(table_id) -> Table:
    """Flip a table to reserved. The previous status is not checked."""
    def _op():
        table = get_table(table_id, lock=True)
        table.status = TABLE_STATUS_RESERVED
        table.updated_at = utcnow()
        db.session.commit()
        return table

    return run_with_retry(_op)


def close_table(table_id) -> Table:
    """
    Flip a table to closed and stamp closed_at.

    Pending orders and the running total are left as they are.
    """
    def _op():
        table = get_table(table_id, lock=True)
        now = utcnow()
        table.status = TABLE_STATUS_CLOSED
        table.closed_at = now
        table.updated_at = now
        db.session.commit()
        current_app.logger.info("Table %s closed with total_cents=%s", table.id, table.total_cents)
        return table

    return run_with_retry(_op)


def _capped_total(table: Table, amount_cents: int) -> int:
    total = (table.total_cents or 0) + amount_cents
    if total > MAX_PRICE_CENTS:
        raise ValidationError(f"Table {table.id} total exceeds maximum of {MAX_PRICE_CENTS / 100:.2f}")
    return total


def settle_table(table: Table, amount_cents: int) -> None:
    """
    Apply a checkout payment to a locked table row and close it.

    Does not commit; runs inside the checkout transaction. The running
    total follows TABLE_SETTLEMENT_MODE.
    """
    mode = current_app.config.get("TABLE_SETTLEMENT_MODE", SETTLEMENT_ACCUMULATE)
    if mode not in SETTLEMENT_MODES:
        raise ValueError(f"Invalid TABLE_SETTLEMENT_MODE: {mode}")

    if mode == SETTLEMENT_REPLACE:
        table.total_cents = amount_cents
    else:
        table.total_cents = _capped_total(table, amount_cents)

    now = utcnow()
    table.status = TABLE_STATUS_CLOSED
    table.closed_at = now
    table.updated_at = now


def accrue_table_order(table: Table, total_cents: int) -> None:
    """Add a table order's total to the locked table row. Does not commit."""
    table.total_cents = _capped_total(table, total_cents)
    table.updated_at = utcnow()


def list_active_tables(user_id=None) -> list[Table]:
    """Open and reserved tables, limited to the user's branch when given."""
    query = db.session.query(Table).filter(
        Table.status.in_([TABLE_STATUS_OPEN, TABLE_STATUS_RESERVED])
    )
    if user_id is not None:
        _, branch = resolve_user_branch(user_id)
        query = query.filter(Table.branch_id == branch.id)
    return query.order_by(Table.name.asc(), Table.id.asc()).all()


def list_all_tables() -> list[Table]:
    return db.session.query(Table).order_by(Table.name.asc(), Table.id.asc()).all()


def list_closed_tabs(*, day: date, branch_id: int | None = None) -> list[dict]:
    """
    Payments taken on a calendar day, presented as closed tabs.

    Direct checkouts without a table are labelled "Payment <number>".
    """
    lower, upper = day_bounds(day)
    query = db.session.query(Payment).filter(Payment.paid_at >= lower, Payment.paid_at < upper)
    if branch_id is not None:
        query = query.filter(Payment.branch_id == branch_id)

    rows = []
    for payment in query.order_by(Payment.paid_at.desc(), Payment.id.desc()).all():
        branch = payment.branch
        rows.append({
            "id": payment.id,
            "payment_number": payment.payment_number,
            "total_amount": from_cents(payment.amount_cents),
            "method": payment.method,
            "closed_at": to_utc_z(payment.paid_at),
            "branch_name": branch.name if branch else None,
            "table_id": payment.table_id,
            "table_name": payment.table.name if payment.table else f"Payment {payment.payment_number}",
        })
    return rows
