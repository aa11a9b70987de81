from pydantic import BaseModel, Field
from typing import Optional, List, Any
from datetime import datetime
from decimal import Decimal
import uuid

from app.schemas.auth import UserBrief
from app.schemas.base import BaseResponseSchema, BaseCreateSchema


# ==================== ORDER ITEM SCHEMAS ====================

class OrderItemResponse(BaseResponseSchema):
    """Order item response schema (snapshot taken at order time)."""
    product_id: uuid.UUID
    name: str
    sku: str
    price: Decimal
    quantity: int
    line_total: Decimal


# ==================== ORDER SCHEMAS ====================

class OrderCreate(BaseCreateSchema):
    """
    Order creation schema.

    Cart and amounts are passed through untyped; OrderService rejects
    malformed lines and negative amounts with a 400 so every cart error
    has one shape.
    """
    items: Any = Field(
        default=None,
        description="Cart lines",
        examples=[[{"product_id": "3fa85f64-5717-4562-b3fc-2c963f66afa6", "quantity": 2}]],
    )
    tax: Any = Decimal("0")
    discount: Any = Decimal("0")
    notes: str = ""


class OrderStatusUpdate(BaseModel):
    """Order status update. Validated against OrderStatus by the service."""
    status: str


class OrderResponse(BaseResponseSchema):
    """Order response schema."""
    id: uuid.UUID
    items: List[OrderItemResponse]
    sub_total: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    status: str
    notes: str
    created_by: uuid.UUID
    creator: Optional[UserBrief] = None
    created_at: datetime
    updated_at: datetime


class OrderListResponse(BaseModel):
    items: List[OrderResponse]
    total: int


class OrderStatusResponse(BaseModel):
    message: str
    order: OrderResponse
