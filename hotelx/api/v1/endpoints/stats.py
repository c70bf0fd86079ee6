from fastapi import APIRouter

from hotelx.core.common_deps import CurrentUserDep, StatsServiceDep
from hotelx.schemas.responses import DashboardStats

router = APIRouter()


@router.get("/", response_model=DashboardStats)
async def get_dashboard_stats(service: StatsServiceDep, current_user: CurrentUserDep):
    return await service.get_dashboard_stats()
