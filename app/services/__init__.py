# Services module
from app.services.auth_service import AuthService
from app.services.product_service import ProductService
from app.services.inventory_service import InventoryService
from app.services.order_service import OrderService
from app.services.dashboard_service import DashboardService

__all__ = [
    "AuthService",
    "ProductService",
    "InventoryService",
    "OrderService",
    "DashboardService",
]
