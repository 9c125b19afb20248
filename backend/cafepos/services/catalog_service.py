# Overview: Service-layer operations for the menu catalog and per-user favourites.

from __future__ import annotations

from ..extensions import db
from ..models import Category, Favorite, Product, User
from ..validation import NotFoundError, ValidationError, to_int
from cafepos.time_utils import utcnow


def list_products() -> list[Product]:
    """Active products, alphabetical."""
    return (
        db.session.query(Product)
        .filter(Product.is_active.is_(True))
        .order_by(Product.name.asc())
        .all()
    )


def list_categories() -> list[Category]:
    return db.session.query(Category).order_by(Category.sort_order.asc(), Category.name.asc()).all()


def list_products_for_category(category_id: int, user_id: int | None = None) -> list[dict]:
    """
    Products shown under a menu category.

    The quick actions category (shows_favorites) lists the user's favourite
    products instead, or nothing when no user is given.
    """
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")

    if category.shows_favorites:
        if user_id is None:
            return []
        return [
            dict(fav.product.to_dict(), type="favorite")
            for fav in list_favorites(user_id)
            if fav.product is not None
        ]

    products = (
        db.session.query(Product)
        .filter(Product.category_id == category.id, Product.is_active.is_(True))
        .order_by(Product.name.asc())
        .all()
    )
    return [dict(p.to_dict(), type="normal") for p in products]


def list_favorites(user_id: int) -> list[Favorite]:
    return (
        db.session.query(Favorite)
        .filter(Favorite.user_id == user_id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        .all()
    )


def _parse_pair(user_id, product_id) -> tuple[int, int]:
    if not user_id or not product_id:
        raise ValidationError("userId and productId are required")
    return to_int(user_id, "userId", minimum=1), to_int(product_id, "productId", minimum=1)


def add_favorite(*, user_id, product_id) -> Favorite:
    """Pin a product for a user; pinning it again refreshes its timestamp."""
    user_id, product_id = _parse_pair(user_id, product_id)
    if db.session.get(User, user_id) is None:
        raise NotFoundError("User not found")
    if db.session.get(Product, product_id) is None:
        raise NotFoundError("Product not found")

    favorite = db.session.query(Favorite).filter_by(user_id=user_id, product_id=product_id).first()
    if favorite is None:
        favorite = Favorite(user_id=user_id, product_id=product_id, created_at=utcnow())
        db.session.add(favorite)
    else:
        favorite.created_at = utcnow()
    db.session.commit()
    return favorite


def remove_favorite(*, user_id, product_id) -> bool:
    """Unpin a product. Returns False when it was not pinned."""
    user_id, product_id = _parse_pair(user_id, product_id)
    deleted = (
        db.session.query(Favorite)
        .filter_by(user_id=user_id, product_id=product_id)
        .delete(synchronize_session=False)
    )
    db.session.commit()
    return bool(deleted)
