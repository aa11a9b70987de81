"""Inventory models for stock management."""
from enum import Enum
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional
import uuid

from sqlalchemy import String, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.db_types import UUIDType

if TYPE_CHECKING:
    from app.models.product import Product


class StockDirection(str, Enum):
    """Manual stock adjustment direction."""
    IN = "in"
    OUT = "out"


class Inventory(Base):
    """
    Stock record: one row per product.

    A missing row means zero stock; rows are created lazily on first reference.
    """

    __tablename__ = "inventory"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        CheckConstraint("reorder_level >= 0", name="ck_inventory_reorder_level_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)

    product_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("products.id", ondelete="RESTRICT"),
        unique=True,
        nullable=False,
        index=True
    )

    # Stock levels
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reorder_level: Mapped[int] = mapped_column(Integer, default=10, nullable=False)

    location: Mapped[str] = mapped_column(String(100), default="Main", nullable=False)

    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
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

    # Relationships
    product: Mapped["Product"] = relationship("Product", lazy="selectin")

    @property
    def is_low_stock(self) -> bool:
        """Check if stock is at or below reorder level."""
        return self.quantity <= self.reorder_level

    @property
    def is_out_of_stock(self) -> bool:
        return self.quantity == 0

    def __repr__(self):
        return f"<Inventory product={self.product_id} qty={self.quantity}>"
