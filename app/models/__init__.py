# Models module - importing registers every table with Base.metadata
from app.models.user import User, UserRole
from app.models.product import Product, ProductStatus
from app.models.inventory import Inventory, StockDirection
from app.models.order import Order, OrderItem, OrderStatus

__all__ = [
    "User",
    "UserRole",
    "Product",
    "ProductStatus",
    "Inventory",
    "StockDirection",
    "Order",
    "OrderItem",
    "OrderStatus",
]
