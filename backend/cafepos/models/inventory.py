from __future__ import annotations

from ..extensions import db
from cafepos.time_utils import to_utc_z
from cafepos.validation import from_cents

MOVEMENT_IN = "in"
MOVEMENT_OUT = "out"
MOVEMENT_TRANSFER = "transfer"

MOVEMENT_DIRECTIONS = (MOVEMENT_IN, MOVEMENT_OUT, MOVEMENT_TRANSFER)


class StockItem(db.Model):
    """
    Current-quantity snapshot for an ingredient or sellable item.

    The snapshot is only written by the stock service, together with a
    StockMovement whose quantity_after equals the new snapshot.
    """
    __tablename__ = "stock_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=True, index=True)
    name = db.Column(db.String(100), nullable=False)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    minimum_quantity = db.Column(db.Integer, nullable=False, default=10)
    unit = db.Column(db.String(20), nullable=False, default="piece")

    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    product = db.relationship("Product")

    def __repr__(self) -> str:
        return f"<StockItem id={self.id} name={self.name!r} quantity={self.quantity}>"

    @property
    def is_low(self) -> bool:
        return self.quantity < self.minimum_quantity

    def to_dict(self) -> dict:
        product = self.product
        return {
            "id": self.id,
            "product_id": self.product_id,
            "name": self.name,
            "price": from_cents(product.price_cents) if product else 0.0,
            "category_name": product.category.name if product and product.category else "Supplies",
            "quantity": self.quantity,
            "minimum_quantity": self.minimum_quantity,
            "unit": self.unit,
            "branch_id": self.branch_id,
            "is_low": self.is_low,
            "updated_at": to_utc_z(self.updated_at),
        }


class StockMovement(db.Model):
    """Append-only stock ledger row."""
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.Index("ix_stock_movements_item_created", "stock_item_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    stock_item_id = db.Column(db.Integer, db.ForeignKey("stock_items.id"), nullable=False)
    direction = db.Column(db.String(16), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    quantity_before = db.Column(db.Integer, nullable=False)
    quantity_after = db.Column(db.Integer, nullable=False)

    note = db.Column(db.Text, nullable=True)
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id", ondelete="SET NULL"), nullable=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    stock_item = db.relationship("StockItem", backref=db.backref("movements", lazy=True))
    branch = db.relationship("Branch")
    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "stock_item_id": self.stock_item_id,
            "item_name": self.stock_item.name if self.stock_item else None,
            "direction": self.direction,
            "quantity": self.quantity,
            "quantity_before": self.quantity_before,
            "quantity_after": self.quantity_after,
            "note": self.note,
            "branch_id": self.branch_id,
            "branch_name": self.branch.name if self.branch else None,
            "user_id": self.user_id,
            "username": self.user.username if self.user else None,
            "created_at": to_utc_z(self.created_at),
        }
