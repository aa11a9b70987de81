from fastapi import APIRouter

from app.api.deps import DB, CurrentUser
from app.schemas.dashboard import DashboardStats
from app.services.dashboard_service import DashboardService


router = APIRouter(tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    db: DB,
    current_user: CurrentUser,
):
    """Product, stock and order headline numbers plus the latest orders."""
    stats = await DashboardService(db).get_stats()
    return DashboardStats.model_validate(stats, from_attributes=True)
