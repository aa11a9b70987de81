from decimal import Decimal
from typing import Any, Dict
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.inventory import Inventory
from app.models.order import Order
from app.models.product import Product


logger = logging.getLogger(__name__)


class DashboardService:
    """Aggregate numbers for the dashboard."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_stats(self) -> Dict[str, Any]:
        total_products = await self.db.scalar(
            select(func.count(Product.id)).where(Product.is_deleted == False)  # noqa: E712
        )
        low_stock_count = await self.db.scalar(
            select(func.count(Inventory.id)).where(Inventory.quantity <= Inventory.reorder_level)
        )
        total_orders = await self.db.scalar(select(func.count(Order.id)))
        total_revenue = await self.db.scalar(select(func.coalesce(func.sum(Order.total), 0)))

        result = await self.db.execute(
            select(Order)
            .order_by(Order.created_at.desc())
            .limit(settings.RECENT_ORDERS_LIMIT)
        )

        return {
            "total_products": total_products or 0,
            "low_stock_count": low_stock_count or 0,
            "total_orders": total_orders or 0,
            "total_revenue": Decimal(str(total_revenue or 0)).quantize(Decimal("0.01")),
            "recent_orders": list(result.scalars().all()),
        }
