import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, List
from decimal import Decimal

from sqlalchemy import String, DateTime, ForeignKey, Integer, Text, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.db_types import UUIDType, MoneyType

if TYPE_CHECKING:
    from app.models.user import User


class OrderStatus(str, Enum):
    """Order status enumeration. Any status may follow any other."""
    PLACED = "placed"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(Base):
    """
    Order model.

    Created once, by OrderService.create_order, in the same transaction that
    decrements stock for its items. Only status (and updated_at) change
    afterwards; orders are never deleted.
    """
    __tablename__ = "orders"
    __table_args__ = (
        Index('ix_order_created_by_created', 'created_by', 'created_at'),
        Index('ix_order_status_created', 'status', 'created_at'),
        CheckConstraint('sub_total >= 0', name='ck_order_sub_total_non_negative'),
        CheckConstraint('tax >= 0', name='ck_order_tax_non_negative'),
        CheckConstraint('discount >= 0', name='ck_order_discount_non_negative'),
        CheckConstraint('total >= 0', name='ck_order_total_non_negative'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    # Amounts
    sub_total: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    tax: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0.00"), nullable=False)
    discount: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0.00"), nullable=False)
    total: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        comment="max(sub_total + tax - discount, 0)"
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        default=OrderStatus.PLACED.value,
        nullable=False,
        index=True,
        comment="placed, processing, completed, cancelled"
    )

    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)

    created_by: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False
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
    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
        lazy="selectin"
    )
    creator: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Order(id='{self.id}', status='{self.status}', total={self.total})>"


class OrderItem(Base):
    """
    Order line item.

    name, sku and price are snapshots of the product at order time and are
    never updated, even if the product changes or is deleted later.
    """
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint('quantity >= 1', name='ck_order_item_quantity_positive'),
        CheckConstraint('price >= 0', name='ck_order_item_price_non_negative'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, comment="0-based cart order")

    product_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    # Snapshots
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku: Mapped[str] = mapped_column(String(50), nullable=False)
    price: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    order: Mapped["Order"] = relationship("Order", back_populates="items")

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def __repr__(self) -> str:
        return f"<OrderItem(sku='{self.sku}', quantity={self.quantity})>"
