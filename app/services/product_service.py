from typing import List, Optional, Tuple
import logging
import uuid

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.product import Product
from app.core.exceptions import DuplicateResourceError, ProductNotFoundError
from app.schemas.product import ProductCreate, ProductUpdate


logger = logging.getLogger(__name__)


class ProductService:
    """Service for managing catalog products."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_product_by_id(self, product_id: uuid.UUID) -> Optional[Product]:
        """Get a non-deleted product by ID."""
        stmt = select(Product).where(
            Product.id == product_id,
            Product.is_deleted == False,  # noqa: E712
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def lookup(self, product_id: uuid.UUID) -> Product:
        """
        Resolve a product id for stock and order operations.

        Inactive products resolve; soft-deleted ones do not.

        Raises:
            ProductNotFoundError: no such product, or it was deleted
        """
        product = await self.get_product_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def _sku_taken(self, sku: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        # Deleted products keep their SKU reserved
        stmt = select(Product.id).where(Product.sku == sku)
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        result = await self.db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def get_products(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        category: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Product], int]:
        """Get non-deleted products, newest first, with filters and pagination."""
        stmt = select(Product).where(Product.is_deleted == False)  # noqa: E712
        count_stmt = select(func.count(Product.id)).where(Product.is_deleted == False)  # noqa: E712

        filters = []
        if status:
            filters.append(Product.status == status)
        if category:
            filters.append(Product.category == category)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            filters.append(
                or_(
                    Product.name.ilike(pattern),
                    Product.sku.ilike(pattern),
                    Product.category.ilike(pattern),
                )
            )

        if filters:
            stmt = stmt.where(*filters)
            count_stmt = count_stmt.where(*filters)

        total = (await self.db.execute(count_stmt)).scalar() or 0

        stmt = stmt.order_by(Product.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def create_product(
        self,
        data: ProductCreate,
        created_by: Optional[uuid.UUID] = None,
    ) -> Product:
        """
        Create a product.

        Raises:
            DuplicateResourceError: SKU already used by any product
        """
        if await self._sku_taken(data.sku):
            raise DuplicateResourceError("SKU already exists")

        values = data.model_dump()
        values["status"] = data.status.value
        product = Product(**values, created_by=created_by)
        self.db.add(product)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateResourceError("SKU already exists")
        await self.db.refresh(product)

        logger.info(f"Created product {product.sku} ({product.id})")
        return product

    async def update_product(self, product_id: uuid.UUID, data: ProductUpdate) -> Product:
        """Update the provided fields of a non-deleted product."""
        product = await self.lookup(product_id)

        updates = data.model_dump(exclude_unset=True)
        updates = {key: value for key, value in updates.items() if value is not None}

        if "sku" in updates and await self._sku_taken(updates["sku"], exclude_id=product.id):
            raise DuplicateResourceError("SKU already exists")
        if "status" in updates:
            updates["status"] = data.status.value

        for key, value in updates.items():
            setattr(product, key, value)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateResourceError("SKU already exists")
        await self.db.refresh(product)
        return product

    async def delete_product(self, product_id: uuid.UUID) -> Product:
        """Soft delete. Stock record and past orders are kept."""
        product = await self.lookup(product_id)
        product.is_deleted = True
        await self.db.commit()

        logger.info(f"Soft-deleted product {product.sku} ({product.id})")
        return product
