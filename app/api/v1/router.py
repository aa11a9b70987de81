from fastapi import APIRouter

from app.api.v1.endpoints import (
    auth,
    products,
    inventory,
    orders,
    dashboard,
)


api_router = APIRouter(prefix="/api")

# ==================== Access ====================
api_router.include_router(
    auth.router,
    prefix="/auth",
)

# ==================== Catalog & Stock ====================
api_router.include_router(
    products.router,
    prefix="/products",
)
api_router.include_router(
    inventory.router,
    prefix="/inventory",
)

# ==================== Orders ====================
api_router.include_router(
    orders.router,
    prefix="/orders",
)

# ==================== Reporting ====================
api_router.include_router(
    dashboard.router,
    prefix="/dashboard",
)
