from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
import uuid

from app.schemas.auth import UserBrief
from app.schemas.base import BaseResponseSchema


class RecentOrder(BaseResponseSchema):
    id: uuid.UUID
    total: Decimal
    status: str
    created_at: datetime
    creator: Optional[UserBrief] = None


class DashboardStats(BaseModel):
    """Headline numbers for the dashboard."""
    total_products: int
    low_stock_count: int
    total_orders: int
    total_revenue: Decimal
    recent_orders: List[RecentOrder]
