from typing import Optional
import uuid

from fastapi import APIRouter, Query

from app.api.deps import DB, CurrentUser, AdminUser
from app.schemas.inventory import (
    InventoryResponse,
    InventoryListResponse,
    StockSettingsUpdate,
    StockAdjustmentRequest,
    StockAdjustmentResponse,
)
from app.models.inventory import StockDirection
from app.services.inventory_service import InventoryService


router = APIRouter(tags=["Inventory"])


@router.get("", response_model=InventoryListResponse)
async def list_inventory(
    db: DB,
    current_user: CurrentUser,
    q: Optional[str] = Query(None, description="Search in product name, SKU and category"),
    low_stock: bool = Query(False, description="Only records at or below reorder level"),
):
    """Stock records of all non-deleted products."""
    service = InventoryService(db)
    records = await service.get_inventory(search=q, low_stock_only=low_stock)

    return InventoryListResponse(
        items=[InventoryResponse.model_validate(r) for r in records],
        total=len(records),
    )


@router.get("/{product_id}", response_model=InventoryResponse)
async def get_product_inventory(
    product_id: uuid.UUID,
    db: DB,
    current_user: CurrentUser,
):
    service = InventoryService(db)
    record = await service.get_inventory_by_product(product_id)
    return InventoryResponse.model_validate(record)


@router.put("/{product_id}", response_model=InventoryResponse)
async def update_inventory_settings(
    product_id: uuid.UUID,
    data: StockSettingsUpdate,
    db: DB,
    current_user: AdminUser,
):
    """Update reorder level and/or location."""
    service = InventoryService(db)
    record = await service.update_stock_settings(
        product_id,
        reorder_level=data.reorder_level,
        location=data.location,
        updated_by=current_user.id,
    )
    return InventoryResponse.model_validate(record)


@router.post("/{product_id}/adjust", response_model=StockAdjustmentResponse)
async def adjust_stock(
    product_id: uuid.UUID,
    data: StockAdjustmentRequest,
    db: DB,
    current_user: AdminUser,
):
    """Stock in / stock out."""
    service = InventoryService(db)
    record, low_stock = await service.adjust_stock(
        product_id,
        direction=data.type,
        amount=data.amount,
        updated_by=current_user.id,
    )

    verb = "added" if data.type == StockDirection.IN else "reduced"
    return StockAdjustmentResponse(
        message=f"Stock {verb} successfully",
        low_stock=low_stock,
        inventory=InventoryResponse.model_validate(record),
    )
