from typing import Optional
from math import ceil
import uuid

from fastapi import APIRouter, Query, status

from app.api.deps import DB, CurrentUser, AdminUser
from app.models.product import ProductStatus
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    ProductDeleteResponse,
)
from app.services.product_service import ProductService


router = APIRouter(tags=["Products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    db: DB,
    current_user: CurrentUser,
    q: Optional[str] = Query(None, description="Search in name, SKU and category"),
    product_status: Optional[ProductStatus] = Query(None, alias="status"),
    category: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """Get paginated, non-deleted products, newest first."""
    service = ProductService(db)
    skip = (page - 1) * limit

    products, total = await service.get_products(
        search=q,
        status=product_status.value if product_status else None,
        category=category,
        skip=skip,
        limit=limit,
    )

    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        limit=limit,
        pages=ceil(total / limit) if total > 0 else 0,
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: uuid.UUID,
    db: DB,
    current_user: CurrentUser,
):
    service = ProductService(db)
    product = await service.lookup(product_id)
    return ProductResponse.model_validate(product)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    db: DB,
    current_user: AdminUser,
):
    """Create a product. SKU is normalised to upper-case and must be unique."""
    service = ProductService(db)
    product = await service.create_product(data, created_by=current_user.id)
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: uuid.UUID,
    data: ProductUpdate,
    db: DB,
    current_user: AdminUser,
):
    service = ProductService(db)
    product = await service.update_product(product_id, data)
    return ProductResponse.model_validate(product)


@router.delete("/{product_id}", response_model=ProductDeleteResponse)
async def delete_product(
    product_id: uuid.UUID,
    db: DB,
    current_user: AdminUser,
):
    """Soft delete a product. Its stock record and past orders are kept."""
    service = ProductService(db)
    product = await service.delete_product(product_id)
    return ProductDeleteResponse(message="Product deleted", product_id=product.id)
