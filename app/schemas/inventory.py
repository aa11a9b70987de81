from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
import uuid

from app.models.inventory import StockDirection
from app.schemas.base import BaseResponseSchema, BaseUpdateSchema
from app.schemas.product import ProductBrief


class InventoryResponse(BaseResponseSchema):
    """Stock record for one product."""
    id: uuid.UUID
    product_id: uuid.UUID
    product: Optional[ProductBrief] = None
    quantity: int
    reorder_level: int
    location: str
    is_low_stock: bool
    updated_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class InventoryListResponse(BaseModel):
    items: List[InventoryResponse]
    total: int


class StockSettingsUpdate(BaseUpdateSchema):
    """Reorder level / location update. Quantity is changed only through adjustments."""
    reorder_level: Optional[int] = Field(None, description="Low-stock threshold")
    location: Optional[str] = Field(None, max_length=100)


class StockAdjustmentRequest(BaseModel):
    """Manual stock movement."""
    type: StockDirection = Field(..., description="in or out")
    amount: int = Field(..., description="Units to move, must be positive")


class StockAdjustmentResponse(BaseModel):
    message: str
    low_stock: bool
    inventory: InventoryResponse
