"""
Inventory Service: the stock ledger.

One Inventory row per product holds its on-hand quantity. Every decrement is a
single conditional UPDATE that re-checks the persisted quantity at write time,
so quantity never goes below zero no matter how callers interleave.

ensure_stock_record and check_and_reserve never commit; they join the caller's
unit of work (see OrderService.create_order). adjust_stock and
update_stock_settings are standalone units of work and commit themselves.
"""
from typing import Optional, List, Tuple, Union
import logging
import uuid

from sqlalchemy import select, update, or_
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import InvalidRequestError, InsufficientStockError
from app.core.locks import product_locks
from app.models.inventory import Inventory, StockDirection
from app.models.product import Product
from app.services.product_service import ProductService


logger = logging.getLogger(__name__)


def _positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class InventoryService:
    """Service for stock record reads and writes."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.products = ProductService(db)

    # ==================== LEDGER PRIMITIVES ====================

    async def _get_record(
        self,
        product_id: uuid.UUID,
        reload: bool = False,
    ) -> Optional[Inventory]:
        stmt = select(Inventory).where(Inventory.product_id == product_id)
        if reload:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def ensure_stock_record(
        self,
        product_id: uuid.UUID,
        updated_by: Optional[uuid.UUID] = None,
    ) -> Inventory:
        """
        Return the product's stock record, creating an empty one if missing.

        Idempotent: an existing record is returned untouched. The insert is
        ON CONFLICT DO NOTHING on product_id, so a record created by another
        process between the read and the insert is picked up, not an error.
        """
        record = await self._get_record(product_id)
        if record is not None:
            return record

        if self.db.get_bind().dialect.name == "postgresql":
            insert_stmt = postgresql_insert(Inventory)
        else:
            insert_stmt = sqlite_insert(Inventory)

        await self.db.execute(
            insert_stmt.values(
                product_id=product_id,
                quantity=0,
                reorder_level=settings.DEFAULT_REORDER_LEVEL,
                location=settings.DEFAULT_STOCK_LOCATION,
                updated_by=updated_by,
            ).on_conflict_do_nothing(index_elements=[Inventory.product_id])
        )

        logger.debug(f"Ensured stock record for product {product_id}")
        return await self._get_record(product_id)

    async def _decrement(
        self,
        record: Inventory,
        amount: int,
        updated_by: Optional[uuid.UUID],
    ) -> Optional[int]:
        """Conditional decrement. Returns the new quantity, or None if stock was short."""
        stmt = (
            update(Inventory)
            .where(
                Inventory.id == record.id,
                Inventory.quantity >= amount,
            )
            .values(
                quantity=Inventory.quantity - amount,
                updated_by=updated_by if updated_by is not None else Inventory.updated_by,
            )
            .returning(Inventory.quantity)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        new_quantity = result.scalar_one_or_none()

        # Pull the persisted values back into the identity map
        await self.db.refresh(record)
        return new_quantity

    async def check_and_reserve(
        self,
        product: Product,
        quantity: int,
        updated_by: Optional[uuid.UUID] = None,
    ) -> Inventory:
        """
        Decrement the product's stock by quantity, or fail without writing.

        Raises:
            InvalidRequestError: quantity is not a positive integer
            InsufficientStockError: persisted quantity is below the request
        """
        if not _positive_int(quantity):
            raise InvalidRequestError("Quantity must be a positive integer")

        record = await self.ensure_stock_record(product.id, updated_by=updated_by)

        if await self._decrement(record, quantity, updated_by) is None:
            raise InsufficientStockError(
                product_id=product.id,
                available=record.quantity,
                required=quantity,
                product_name=product.name,
            )
        return record

    # ==================== STANDALONE OPERATIONS ====================

    async def adjust_stock(
        self,
        product_id: uuid.UUID,
        direction: Union[StockDirection, str],
        amount: int,
        updated_by: Optional[uuid.UUID] = None,
    ) -> Tuple[Inventory, bool]:
        """
        Manual stock movement (goods received, write-off, correction).

        Returns:
            (record, is_low_stock) after the movement is committed
        """
        try:
            direction = StockDirection(direction)
        except ValueError:
            raise InvalidRequestError("type must be 'in' or 'out'")
        if not _positive_int(amount):
            raise InvalidRequestError("amount must be > 0")

        product = await self.products.lookup(product_id)

        async with product_locks.hold([product.id]):
            try:
                record = await self.ensure_stock_record(product.id, updated_by=updated_by)

                if direction == StockDirection.IN:
                    await self.db.execute(
                        update(Inventory)
                        .where(Inventory.id == record.id)
                        .values(
                            quantity=Inventory.quantity + amount,
                            updated_by=updated_by if updated_by is not None else Inventory.updated_by,
                        )
                        .execution_options(synchronize_session=False)
                    )
                    await self.db.refresh(record)
                elif await self._decrement(record, amount, updated_by) is None:
                    raise InsufficientStockError(
                        product_id=product.id,
                        available=record.quantity,
                        required=amount,
                        product_name=product.name,
                    )

                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        record = await self._get_record(product.id, reload=True)
        low_stock = record.is_low_stock
        logger.info(f"Stock {direction.value} {product.sku} x{amount} -> {record.quantity}")
        if low_stock:
            logger.warning(
                f"Low stock: {product.sku} at {record.quantity} "
                f"(reorder level {record.reorder_level})"
            )
        return record, low_stock

    async def update_stock_settings(
        self,
        product_id: uuid.UUID,
        reorder_level: Optional[int] = None,
        location: Optional[str] = None,
        updated_by: Optional[uuid.UUID] = None,
    ) -> Inventory:
        """Change reorder level and/or location. Quantity is never touched."""
        if reorder_level is not None and (
            not isinstance(reorder_level, int)
            or isinstance(reorder_level, bool)
            or reorder_level < 0
        ):
            raise InvalidRequestError("reorder_level must be a non-negative integer")

        product = await self.products.lookup(product_id)

        async with product_locks.hold([product.id]):
            try:
                record = await self.ensure_stock_record(product.id, updated_by=updated_by)

                if reorder_level is not None:
                    record.reorder_level = reorder_level
                if location is not None:
                    record.location = location
                if updated_by is not None:
                    record.updated_by = updated_by

                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        return await self._get_record(product.id, reload=True)

    # ==================== READS ====================

    async def get_inventory(
        self,
        search: Optional[str] = None,
        low_stock_only: bool = False,
    ) -> List[Inventory]:
        """Stock records of non-deleted products, most recently updated first."""
        stmt = (
            select(Inventory)
            .join(Product, Product.id == Inventory.product_id)
            .where(Product.is_deleted == False)  # noqa: E712
        )

        if low_stock_only:
            stmt = stmt.where(Inventory.quantity <= Inventory.reorder_level)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    Product.name.ilike(pattern),
                    Product.sku.ilike(pattern),
                    Product.category.ilike(pattern),
                )
            )

        stmt = stmt.order_by(Inventory.updated_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_inventory_by_product(self, product_id: uuid.UUID) -> Inventory:
        """Stock record of one product, created (and committed) on first read."""
        product = await self.products.lookup(product_id)

        record = await self._get_record(product.id)
        if record is not None:
            return record

        async with product_locks.hold([product.id]):
            try:
                record = await self.ensure_stock_record(product.id)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise
        return await self._get_record(product.id, reload=True)
