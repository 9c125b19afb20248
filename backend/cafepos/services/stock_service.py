# Overview: Service-layer operations for stock; snapshot plus append-only movement ledger.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Branch, Product, StockItem, StockMovement, User
from ..models.inventory import MOVEMENT_IN, MOVEMENT_OUT, MOVEMENT_TRANSFER
from ..validation import NotFoundError, ValidationError, to_int, to_optional_int, to_text
from cafepos.time_utils import utcnow
from .concurrency import lock_for_update, run_with_retry
"""
Stock Invariants (authoritative)

- StockItem.quantity is the current snapshot; StockMovement rows are append-only.
- The snapshot and its movement are written in the same transaction, so the
  latest movement's quantity_after always equals the snapshot.
- An "out" movement that would drive quantity below zero is rejected and
  nothing is written.
- "transfer" records the movement without changing the snapshot.
- The stock row is locked (SELECT ... FOR UPDATE) for the read-check-write.
"""

DIRECTION_ALIASES = {
    "in": MOVEMENT_IN,
    "giris": MOVEMENT_IN,
    "out": MOVEMENT_OUT,
    "cikis": MOVEMENT_OUT,
    "transfer": MOVEMENT_TRANSFER,
}


class InsufficientStockError(ValidationError):
    """Raised when an outgoing movement exceeds the quantity on hand."""
    pass


def normalize_direction(value) -> str:
    direction = DIRECTION_ALIASES.get(str(value or "").strip().lower())
    if direction is None:
        raise ValidationError("direction must be one of in, out, transfer")
    return direction


def _ensure_exists(model, ident: int | None, label: str) -> None:
    if ident is not None and db.session.get(model, ident) is None:
        raise NotFoundError(f"{label} not found")


def create_stock_item(
    *,
    name,
    quantity=0,
    minimum_quantity=10,
    unit="piece",
    product_id=None,
    branch_id=None,
) -> StockItem:
    name = to_text(name, "name", max_length=100)
    quantity = to_int(quantity, "quantity", minimum=0)
    minimum_quantity = to_int(minimum_quantity, "minimum_quantity", minimum=0)
    unit = to_text(unit, "unit", max_length=20)
    product_id = to_optional_int(product_id, "product_id")
    branch_id = to_optional_int(branch_id, "branch_id")

    def _op():
        _ensure_exists(Product, product_id, "Product")
        _ensure_exists(Branch, branch_id, "Branch")
        now = utcnow()
        item = StockItem(
            name=name,
            quantity=quantity,
            minimum_quantity=minimum_quantity,
            unit=unit,
            product_id=product_id,
            branch_id=branch_id,
            created_at=now,
            updated_at=now,
        )
        db.session.add(item)
        db.session.commit()
        return item

    return run_with_retry(_op)


def record_movement(
    *,
    stock_item_id: int,
    quantity,
    direction,
    note=None,
    branch_id=None,
    user_id=None,
) -> StockMovement:
    """
    Apply a stock movement and append it to the ledger.

    Raises:
        ValidationError: bad quantity/direction
        NotFoundError: unknown stock item, branch or user
        InsufficientStockError: "out" larger than the quantity on hand
    """
    quantity = to_int(quantity, "quantity", minimum=1)
    direction = normalize_direction(direction)
    note = to_text(note, "note", max_length=1000, required=False)
    branch_id = to_optional_int(branch_id, "branch_id")
    user_id = to_optional_int(user_id, "user_id")

    def _op():
        item = lock_for_update(db.session.query(StockItem).filter_by(id=stock_item_id)).first()
        if item is None:
            raise NotFoundError("Stock item not found")
        _ensure_exists(Branch, branch_id, "Branch")
        _ensure_exists(User, user_id, "User")

        before = item.quantity
        if direction == MOVEMENT_IN:
            after = before + quantity
        elif direction == MOVEMENT_OUT:
            after = before - quantity
            if after < 0:
                raise InsufficientStockError(
                    f"Insufficient stock for {item.name}: {before} on hand, {quantity} requested"
                )
        else:
            after = before

        now = utcnow()
        item.quantity = after
        item.updated_at = now

        movement = StockMovement(
            stock_item_id=item.id,
            direction=direction,
            quantity=quantity,
            quantity_before=before,
            quantity_after=after,
            note=note,
            branch_id=branch_id if branch_id is not None else item.branch_id,
            user_id=user_id,
            created_at=now,
        )
        db.session.add(movement)
        db.session.commit()

        current_app.logger.info(
            "Stock %s %s %d: %d -> %d", item.id, direction, quantity, before, after,
        )
        if item.is_low:
            current_app.logger.warning(
                "Stock %s (%s) below minimum: %d < %d", item.id, item.name, item.quantity, item.minimum_quantity,
            )
        return movement

    return run_with_retry(_op)


def list_stock_items() -> list[StockItem]:
    return db.session.query(StockItem).order_by(StockItem.name.asc()).all()


def list_movements(limit: int = 50) -> list[StockMovement]:
    return (
        db.session.query(StockMovement)
        .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        .limit(limit)
        .all()
    )
