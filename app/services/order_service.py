"""
Order placement engine.

create_order turns a cart into an order in one unit of work: every line's
stock is decremented and the order row is inserted in the same session
transaction, or nothing happens at all.
"""
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Sequence, Union
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AccessDeniedError,
    InventoryHubError,
    InvalidRequestError,
    InvalidStatusError,
    OrderCreationError,
    OrderNotFoundError,
)
from app.core.locks import product_locks
from app.models.order import Order, OrderItem, OrderStatus
from app.models.user import UserRole
from app.services.inventory_service import InventoryService
from app.services.product_service import ProductService


logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _as_amount(value: Any, name: str) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise InvalidRequestError(f"{name} must be a number")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise InvalidRequestError(f"{name} must be a number")
    if not amount.is_finite() or amount < 0:
        raise InvalidRequestError(f"{name} must be >= 0")
    return amount


class OrderService:
    """Service for order placement, status changes and order reads."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.products = ProductService(db)
        self.inventory = InventoryService(db)

    @staticmethod
    def _validate_items(items: Any) -> List[tuple]:
        """Normalize the cart to (product_id, quantity) pairs, rejecting bad input."""
        if not items or isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Sequence):
            raise InvalidRequestError("items array is required")

        lines = []
        for item in items:
            product_id = _field(item, "product_id")
            quantity = _field(item, "quantity")

            if product_id is not None and not isinstance(product_id, uuid.UUID):
                try:
                    product_id = uuid.UUID(str(product_id))
                except ValueError:
                    product_id = None

            if (
                product_id is None
                or not isinstance(quantity, int)
                or isinstance(quantity, bool)
                or quantity <= 0
            ):
                raise InvalidRequestError("Each item needs product_id and quantity > 0")

            lines.append((product_id, quantity))
        return lines

    async def _load_order(self, order_id: uuid.UUID) -> Optional[Order]:
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create_order(
        self,
        items: Sequence[Any],
        created_by: uuid.UUID,
        tax: Union[Decimal, int, float, str, None] = ZERO,
        discount: Union[Decimal, int, float, str, None] = ZERO,
        notes: Optional[str] = "",
    ) -> Order:
        """
        Place an order.

        Each item is a mapping or object with product_id and quantity.
        Locks for all products in the cart are taken in sorted id order and
        held until the transaction ends.

        Raises:
            InvalidRequestError: malformed cart or amounts (nothing touched)
            ProductNotFoundError: unknown or deleted product
            InsufficientStockError: a line asks for more than is on hand
            OrderCreationError: database failure; all writes rolled back
        """
        lines = self._validate_items(items)
        tax_amount = _as_amount(tax, "tax")
        discount_amount = _as_amount(discount, "discount")
        if created_by is None:
            raise InvalidRequestError("created_by is required")

        async with product_locks.hold(product_id for product_id, _ in lines):
            try:
                order_items = []
                sub_total = ZERO

                for position, (product_id, quantity) in enumerate(lines):
                    product = await self.products.lookup(product_id)
                    await self.inventory.check_and_reserve(
                        product, quantity, updated_by=created_by
                    )

                    order_items.append(
                        OrderItem(
                            position=position,
                            product_id=product.id,
                            name=product.name,
                            sku=product.sku,
                            price=product.price,
                            quantity=quantity,
                        )
                    )
                    sub_total += product.price * quantity

                total = max(sub_total + tax_amount - discount_amount, ZERO)

                order = Order(
                    items=order_items,
                    sub_total=sub_total,
                    tax=tax_amount,
                    discount=discount_amount,
                    total=total,
                    status=OrderStatus.PLACED.value,
                    notes=notes or "",
                    created_by=created_by,
                )
                self.db.add(order)
                await self.db.flush()
                await self.db.commit()

            except InventoryHubError as e:
                await self.db.rollback()
                logger.warning(f"Order rejected for user {created_by}: {e.message}")
                raise
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"Database error creating order: {e}")
                raise OrderCreationError() from e
            except Exception:
                await self.db.rollback()
                raise

        logger.info(
            f"Order {order.id} placed by {created_by}: "
            f"{len(order_items)} items, total {total}"
        )
        return await self._load_order(order.id)

    async def update_order_status(
        self,
        order_id: uuid.UUID,
        new_status: Union[OrderStatus, str],
    ) -> Order:
        """
        Set an order's status. Any status may follow any other.

        Stock is not touched, cancelled orders included.
        """
        try:
            status = OrderStatus(new_status)
        except ValueError:
            raise InvalidStatusError(new_status)

        order = await self._load_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)

        previous = order.status
        order.status = status.value
        await self.db.commit()

        logger.info(f"Order {order.id} status {previous} -> {status.value}")
        return await self._load_order(order.id)

    async def get_orders(
        self,
        caller_id: uuid.UUID,
        caller_role: Union[UserRole, str],
    ) -> List[Order]:
        """All orders for admins, only the caller's own otherwise. Newest first."""
        stmt = select(Order)
        if caller_role != UserRole.ADMIN.value:
            stmt = stmt.where(Order.created_by == caller_id)

        stmt = stmt.order_by(Order.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_order_by_id(
        self,
        order_id: uuid.UUID,
        caller_id: uuid.UUID,
        caller_role: Union[UserRole, str],
    ) -> Order:
        order = await self._load_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)

        if caller_role != UserRole.ADMIN.value and order.created_by != caller_id:
            raise AccessDeniedError()

        return order
