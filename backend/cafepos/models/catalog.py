from __future__ import annotations

from ..extensions import db
from cafepos.time_utils import to_utc_z
from cafepos.validation import from_cents


class Category(db.Model):
    """Menu category (hot drinks, food, extras...)."""
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(255), nullable=True)

    # Menu display order; ties fall back to name
    sort_order = db.Column(db.Integer, nullable=False, default=100)

    # The quick actions category lists the user's favourites instead of its own products
    shows_favorites = db.Column(db.Boolean, nullable=False, default=False)
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=True, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "sort_order": self.sort_order,
            "shows_favorites": self.shows_favorites,
        }


class Product(db.Model):
    """
    Sellable menu item.

    Authoritative price storage is in cents. Order lines copy the name and
    price at write time, so edits here never rewrite past receipts.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_category_active", "category_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    price_cents = db.Column(db.Integer, nullable=False, default=0)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    category = db.relationship("Category", backref=db.backref("products", lazy=True))

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} price_cents={self.price_cents}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": from_cents(self.price_cents),
            "price_cents": self.price_cents,
            "category_id": self.category_id,
            "category": self.category.name if self.category else None,
            "is_active": self.is_active,
        }


class Favorite(db.Model):
    """A user's pinned product, shown in the quick actions category."""
    __tablename__ = "favorites"
    __table_args__ = (
        db.UniqueConstraint("product_id", "user_id", name="uq_favorites_product_user"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        product = self.product
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": product.name if product else None,
            "price": from_cents(product.price_cents) if product else None,
            "category_id": product.category_id if product else None,
            "category_name": product.category.name if product and product.category else None,
            "created_at": to_utc_z(self.created_at),
        }
