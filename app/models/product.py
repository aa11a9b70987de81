import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from decimal import Decimal

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Text, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.db_types import UUIDType, MoneyType


class ProductStatus(str, Enum):
    """Product status enumeration."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class Product(Base):
    """
    Catalog product.

    Products are soft-deleted (is_deleted=True): hidden from every catalog
    read while their stock record and historical orders remain.
    """
    __tablename__ = "products"
    __table_args__ = (
        Index('ix_product_deleted_created', 'is_deleted', 'created_at'),
        CheckConstraint('price >= 0', name='ck_product_price_non_negative'),
        CheckConstraint('cost >= 0', name='ck_product_cost_non_negative'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    # Basic Info
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        comment="Unique product code, stored upper-case"
    )
    category: Mapped[str] = mapped_column(String(100), default="General", nullable=False)

    # Pricing
    price: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        comment="Selling price"
    )
    cost: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        default=Decimal("0.00"),
        comment="Buying cost (internal)"
    )

    unit: Mapped[str] = mapped_column(String(20), default="pcs", nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    image_url: Mapped[str] = mapped_column(String(500), default="", nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default=ProductStatus.ACTIVE.value,
        nullable=False,
        comment="active, inactive"
    )

    # Soft delete
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    @property
    def active(self) -> bool:
        return self.status == ProductStatus.ACTIVE.value

    def __repr__(self) -> str:
        return f"<Product(sku='{self.sku}', name='{self.name}')>"
