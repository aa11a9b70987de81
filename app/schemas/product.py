from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import uuid

from app.models.product import ProductStatus
from app.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema


def _normalize_sku(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().upper()
    if not v:
        raise ValueError("SKU is required")
    return v


class ProductCreate(BaseCreateSchema):
    """Product creation schema."""
    name: str = Field(..., min_length=1, max_length=255)
    sku: str = Field(..., min_length=1, max_length=50, description="Stored upper-case")
    category: str = Field(default="General", max_length=100)
    price: Decimal = Field(..., ge=0, description="Selling price")
    cost: Decimal = Field(default=Decimal("0"), ge=0, description="Buying cost")
    unit: str = Field(default="pcs", max_length=20)
    description: str = ""
    image_url: str = Field(default="", max_length=500)
    status: ProductStatus = ProductStatus.ACTIVE

    @field_validator("sku")
    @classmethod
    def normalize_sku(cls, v: str) -> str:
        return _normalize_sku(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class ProductUpdate(BaseUpdateSchema):
    """Product update schema. Only provided fields are changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sku: Optional[str] = Field(None, min_length=1, max_length=50)
    category: Optional[str] = Field(None, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    unit: Optional[str] = Field(None, max_length=20)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    status: Optional[ProductStatus] = None

    @field_validator("sku")
    @classmethod
    def normalize_sku(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_sku(v)


class ProductResponse(BaseResponseSchema):
    """Product response schema."""
    id: uuid.UUID
    name: str
    sku: str
    category: str
    price: Decimal
    cost: Decimal
    unit: str
    description: str
    image_url: str
    status: str
    active: bool
    created_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class ProductBrief(BaseResponseSchema):
    """Product reference embedded in stock records."""
    id: uuid.UUID
    name: str
    sku: str
    category: str
    price: Decimal
    unit: str
    status: str


class ProductListResponse(BaseModel):
    """Paginated product list."""
    items: List[ProductResponse]
    total: int
    page: int
    limit: int
    pages: int


class ProductDeleteResponse(BaseModel):
    message: str
    product_id: uuid.UUID
