from __future__ import annotations

from ..extensions import db
from cafepos.time_utils import to_utc_z
from cafepos.validation import from_cents

ORDER_STATUS_PENDING = "pending"
ORDER_STATUS_COMPLETED = "completed"

ORDER_KIND_TABLE = "table"
ORDER_KIND_DIRECT = "direct"

PAYMENT_METHOD_CASH = "cash"
PAYMENT_METHOD_CARD = "card"
PAYMENT_METHOD_HOUSE_ACCOUNT = "house_account"

PAYMENT_METHODS = (PAYMENT_METHOD_CASH, PAYMENT_METHOD_CARD, PAYMENT_METHOD_HOUSE_ACCOUNT)


class Order(db.Model):
    """
    Requested items and their total, independent of payment.

    Table orders start "pending" and accrue onto the table's running total;
    direct (checkout) orders are created "completed" alongside a Payment.
    Status is free text past the two built-in values.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_table_status", "table_id", "status"),
        db.Index("ix_orders_branch_created", "branch_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Sequence-allocated, e.g. "ORD-001-000042"
    order_number = db.Column(db.String(64), nullable=False, unique=True)

    table_id = db.Column(db.Integer, db.ForeignKey("tables.id"), nullable=True)
    total_cents = db.Column(db.Integer, nullable=False)
    amount_due_cents = db.Column(db.Integer, nullable=False)

    status = db.Column(db.String(32), nullable=False, default=ORDER_STATUS_PENDING)
    kind = db.Column(db.String(16), nullable=False)

    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=False)
    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    table = db.relationship("Table", backref=db.backref("orders", lazy=True))
    lines = db.relationship("OrderLine", backref="order", lazy=True, order_by="OrderLine.id")

    def __repr__(self) -> str:
        return f"<Order id={self.id} number={self.order_number!r} status={self.status}>"

    def to_dict(self, include_lines: bool = False) -> dict:
        data = {
            "id": self.id,
            "order_number": self.order_number,
            "table_id": self.table_id,
            "total_amount": from_cents(self.total_cents),
            "amount_due": from_cents(self.amount_due_cents),
            "total_cents": self.total_cents,
            "status": self.status,
            "kind": self.kind,
            "branch_id": self.branch_id,
            "created_by_user_id": self.created_by_user_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_lines:
            data["lines"] = [line.to_dict() for line in self.lines]
        return data


class OrderLine(db.Model):
    """
    One cart line of an order.

    product_name and unit_price_cents are copied from the cart at write
    time; line_total_cents = quantity * unit_price_cents.
    """
    __tablename__ = "order_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=True, index=True)
    product_name = db.Column(db.String(255), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": from_cents(self.unit_price_cents),
            "line_total": from_cents(self.line_total_cents),
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
        }


class Payment(db.Model):
    """
    Money received at checkout.

    Linked explicitly to the order created in the same transaction. The
    optional idempotency key lets a client retry a checkout safely.
    """
    __tablename__ = "payments"
    __table_args__ = (
        db.Index("ix_payments_branch_paid_at", "branch_id", "paid_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Sequence-allocated, e.g. "PAY-001-000042"
    payment_number = db.Column(db.String(64), nullable=False, unique=True)

    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True, index=True)
    table_id = db.Column(db.Integer, db.ForeignKey("tables.id"), nullable=True, index=True)

    amount_cents = db.Column(db.Integer, nullable=False)
    method = db.Column(db.String(32), nullable=False)

    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=False)
    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    idempotency_key = db.Column(db.String(128), nullable=True, unique=True)

    paid_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    order = db.relationship("Order", backref=db.backref("payments", lazy=True))
    table = db.relationship("Table")
    branch = db.relationship("Branch")

    def __repr__(self) -> str:
        return f"<Payment id={self.id} number={self.payment_number!r} amount_cents={self.amount_cents}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "payment_number": self.payment_number,
            "order_id": self.order_id,
            "table_id": self.table_id,
            "amount": from_cents(self.amount_cents),
            "amount_cents": self.amount_cents,
            "method": self.method,
            "branch_id": self.branch_id,
            "created_by_user_id": self.created_by_user_id,
            "paid_at": to_utc_z(self.paid_at),
        }
