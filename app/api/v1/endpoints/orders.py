import uuid

from fastapi import APIRouter, status

from app.api.deps import DB, CurrentUser, AdminUser
from app.schemas.order import (
    OrderCreate,
    OrderResponse,
    OrderListResponse,
    OrderStatusUpdate,
    OrderStatusResponse,
)
from app.services.order_service import OrderService


router = APIRouter(tags=["Orders"])


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    data: OrderCreate,
    db: DB,
    current_user: CurrentUser,
):
    """
    Place an order.

    Stock for every line is checked and decremented together with the order
    insert; if any line fails nothing is written.
    """
    service = OrderService(db)
    order = await service.create_order(
        items=data.items,
        tax=data.tax,
        discount=data.discount,
        notes=data.notes,
        created_by=current_user.id,
    )
    return OrderResponse.model_validate(order)


@router.get("", response_model=OrderListResponse)
async def list_orders(
    db: DB,
    current_user: CurrentUser,
):
    """Admins get every order; staff only their own."""
    service = OrderService(db)
    orders = await service.get_orders(current_user.id, current_user.role)

    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in orders],
        total=len(orders),
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    db: DB,
    current_user: CurrentUser,
):
    service = OrderService(db)
    order = await service.get_order_by_id(order_id, current_user.id, current_user.role)
    return OrderResponse.model_validate(order)


@router.put("/{order_id}/status", response_model=OrderStatusResponse)
async def update_order_status(
    order_id: uuid.UUID,
    data: OrderStatusUpdate,
    db: DB,
    current_user: AdminUser,
):
    service = OrderService(db)
    order = await service.update_order_status(order_id, data.status)

    return OrderStatusResponse(
        message="Order status updated",
        order=OrderResponse.model_validate(order),
    )
