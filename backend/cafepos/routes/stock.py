# Overview: Flask API routes for stock items and the movement ledger.

from flask import Blueprint, current_app, request

from ..decorators import api_errors, success
from ..services import stock_service

stock_bp = Blueprint("stock", __name__, url_prefix="/api/stock")


def _pick(data: dict, *keys):
    """First present key among the Turkish field name and its English alias."""
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


@stock_bp.get("")
@api_errors("Stock could not be loaded")
def list_stock_route():
    items = stock_service.list_stock_items()
    return success({"stock": [item.to_dict() for item in items]})


@stock_bp.post("")
@api_errors("Stock item could not be created")
def create_stock_item_route():
    """
    Create a stock item.

    Request body:
    {
        "name": "Coffee beans",
        "quantity": 20,
        "minimumQuantity": 5,
        "unit": "kg",
        "productId": 3,  (optional)
        "branchId": 1  (optional)
    }
    """
    data = request.get_json(silent=True) or {}
    minimum = _pick(data, "minimumQuantity", "minimum_quantity")
    item = stock_service.create_stock_item(
        name=data.get("name"),
        quantity=data.get("quantity", 0),
        minimum_quantity=10 if minimum is None else minimum,
        unit=data.get("unit") or "piece",
        product_id=_pick(data, "productId", "product_id"),
        branch_id=_pick(data, "branchId", "sube_id"),
    )
    return success({"item": item.to_dict()}, 201)


@stock_bp.get("/movements")
@api_errors("Stock movements could not be loaded")
def list_movements_route():
    limit = current_app.config.get("STOCK_MOVEMENTS_LIMIT", 50)
    movements = stock_service.list_movements(limit=limit)
    return success({
        "movements": [m.to_dict() for m in movements],
        "total": len(movements),
        "maxRecords": limit,
    })


@stock_bp.put("/<int:stock_item_id>")
@api_errors("Stock could not be updated")
def record_movement_route(stock_item_id: int):
    """
    Record a stock movement against one item.

    Request body:
    {
        "miktar": 5,               (alias: quantity)
        "hareket_tipi": "giris",   (alias: direction; in/giris, out/cikis, transfer)
        "aciklama": "delivery",    (alias: note)
        "sube_id": 1,              (alias: branchId)
        "kullanici_id": 7          (alias: userId)
    }

    Returns:
        200: {yeni_stok, movement}
        400: Bad quantity/direction or insufficient stock (nothing written)
        404: Unknown stock item, branch or user
    """
    data = request.get_json(silent=True) or {}
    movement = stock_service.record_movement(
        stock_item_id=stock_item_id,
        quantity=_pick(data, "miktar", "quantity"),
        direction=_pick(data, "hareket_tipi", "direction"),
        note=_pick(data, "aciklama", "note"),
        branch_id=_pick(data, "sube_id", "branchId"),
        user_id=_pick(data, "kullanici_id", "userId"),
    )
    return success({"yeni_stok": movement.quantity_after, "movement": movement.to_dict()})
