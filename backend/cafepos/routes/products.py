# Overview: Flask API routes for the menu catalog and favourites.

from flask import Blueprint, request

from ..decorators import api_errors, success
from ..services import catalog_service

products_bp = Blueprint("products", __name__, url_prefix="/api")


@products_bp.get("/products")
@api_errors("Products could not be loaded")
def list_products_route():
    return success({"products": [p.to_dict() for p in catalog_service.list_products()]})


@products_bp.get("/products/category/<int:category_id>")
@api_errors("Category products could not be loaded")
def list_category_products_route(category_id: int):
    """
    Products of one category.

    Query params:
    - userId: needed for the quick actions category, which lists the
      user's favourites
    """
    user_id = request.args.get("userId", type=int)
    products = catalog_service.list_products_for_category(category_id, user_id=user_id)
    return success({"products": products})


@products_bp.get("/categories")
@api_errors("Categories could not be loaded")
def list_categories_route():
    return success({"categories": [c.to_dict() for c in catalog_service.list_categories()]})


@products_bp.get("/favorites/<int:user_id>")
@api_errors("Favorites could not be loaded")
def list_favorites_route(user_id: int):
    favorites = catalog_service.list_favorites(user_id)
    return success({"favorites": [f.to_dict() for f in favorites]})


@products_bp.post("/favorites/add")
@api_errors("Favorite could not be added")
def add_favorite_route():
    data = request.get_json(silent=True) or {}
    favorite = catalog_service.add_favorite(user_id=data.get("userId"), product_id=data.get("productId"))
    return success({"favorite": favorite.to_dict()})


@products_bp.delete("/favorites/remove")
@api_errors("Favorite could not be removed")
def remove_favorite_route():
    data = request.get_json(silent=True) or {}
    removed = catalog_service.remove_favorite(user_id=data.get("userId"), product_id=data.get("productId"))
    return success({"removed": removed})
