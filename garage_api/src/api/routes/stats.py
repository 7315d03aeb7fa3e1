from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.results import unwrap
from src.core.deps import CurrentUser, get_current_user
from src.db.session import get_async_session
from src.repositories.vehicles import VehicleRepository
from src.schemas.stats import DashboardStatsRead, VehicleStatsRead
from src.services.statistics import StatisticsService
from src.services.vehicles import load_owned_vehicle

router = APIRouter(tags=["Statistics"])


# PUBLIC_INTERFACE
@router.get(
    "/vehicles/{vehicle_id}/stats",
    response_model=VehicleStatsRead,
    summary="Vehicle statistics",
    description="Mileage, spending, efficiency per energy type and the latest activity of a vehicle.",
)
async def vehicle_stats(
    vehicle_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> VehicleStatsRead:
    vehicle = unwrap(await load_owned_vehicle(VehicleRepository(session), vehicle_id, current.id))
    stats = await StatisticsService(session).get_vehicle_stats(vehicle)
    return VehicleStatsRead.model_validate(stats)


# PUBLIC_INTERFACE
@router.get(
    "/dashboard/stats",
    response_model=DashboardStatsRead,
    summary="Dashboard statistics",
    description="This month's energy spending, distance of the last 30 days and recent activity.",
)
async def dashboard_stats(
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> DashboardStatsRead:
    return DashboardStatsRead.model_validate(await StatisticsService(session).get_dashboard_stats(current.id))
