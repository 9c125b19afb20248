from .branches import Branch
from .auth import User
from .catalog import Category, Product, Favorite
from .tables import Table
from .orders import Order, OrderLine, Payment
from .inventory import StockItem, StockMovement
from .documents import DocumentSequence

__all__ = [
    'Branch',
    'User',
    'Category', 'Product', 'Favorite',
    'Table',
    'Order', 'OrderLine', 'Payment',
    'StockItem', 'StockMovement',
    'DocumentSequence',
]
