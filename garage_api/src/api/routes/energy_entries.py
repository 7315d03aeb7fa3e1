from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.results import unwrap
from src.core.deps import CurrentUser, get_current_user
from src.db.models.enums import EnergyType
from src.db.session import get_async_session
from src.schemas.common import PagedResponse
from src.schemas.energy_entries import EnergyEntryRead, EnergyEntryWrite, EnergyStatsRead
from src.services.energy_entries import EnergyEntryService

router = APIRouter(tags=["Energy Entries"])


# PUBLIC_INTERFACE
@router.get(
    "/energy-entries/my",
    response_model=PagedResponse[EnergyEntryRead],
    summary="List my energy entries",
    description="Energy entries across all of the current user's vehicles, newest first.",
)
async def list_my_energy_entries(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    energy_types: Optional[List[EnergyType]] = Query(None, alias="energyTypes"),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> PagedResponse[EnergyEntryRead]:
    paged = await EnergyEntryService(session).list_for_user(current.id, page, page_size, energy_types)
    return PagedResponse[EnergyEntryRead].from_paged(paged, EnergyEntryRead.model_validate)


# PUBLIC_INTERFACE
@router.post(
    "/vehicles/{vehicle_id}/energy-entries",
    response_model=EnergyEntryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create energy entry",
    description=(
        "Log a fill-up or charge. The energy type must be configured on the vehicle "
        "and mileage must not decrease over time."
    ),
)
async def create_energy_entry(
    payload: EnergyEntryWrite,
    vehicle_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> EnergyEntryRead:
    entry = unwrap(await EnergyEntryService(session).create(vehicle_id, current.id, payload))
    return EnergyEntryRead.model_validate(entry)


# PUBLIC_INTERFACE
@router.get(
    "/vehicles/{vehicle_id}/energy-entries",
    response_model=PagedResponse[EnergyEntryRead],
    summary="List vehicle energy entries",
)
async def list_vehicle_energy_entries(
    vehicle_id: UUID = Path(...),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    energy_types: Optional[List[EnergyType]] = Query(None, alias="energyTypes"),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> PagedResponse[EnergyEntryRead]:
    paged = unwrap(
        await EnergyEntryService(session).list_for_vehicle(vehicle_id, current.id, page, page_size, energy_types)
    )
    return PagedResponse[EnergyEntryRead].from_paged(paged, EnergyEntryRead.model_validate)


# PUBLIC_INTERFACE
@router.get(
    "/vehicles/{vehicle_id}/energy-entries/stats",
    response_model=EnergyStatsRead,
    summary="Energy statistics",
    description="Consumption and cost statistics grouped by energy unit.",
)
async def energy_entry_stats(
    vehicle_id: UUID = Path(...),
    energy_types: Optional[List[EnergyType]] = Query(None, alias="energyTypes"),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> EnergyStatsRead:
    stats = unwrap(await EnergyEntryService(session).stats(vehicle_id, current.id, energy_types))
    return EnergyStatsRead.model_validate(stats)


# PUBLIC_INTERFACE
@router.put(
    "/vehicles/{vehicle_id}/energy-entries/{entry_id}",
    response_model=EnergyEntryRead,
    summary="Update energy entry",
)
async def update_energy_entry(
    payload: EnergyEntryWrite,
    vehicle_id: UUID = Path(...),
    entry_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> EnergyEntryRead:
    entry = unwrap(await EnergyEntryService(session).update(vehicle_id, entry_id, current.id, payload))
    return EnergyEntryRead.model_validate(entry)


# PUBLIC_INTERFACE
@router.delete(
    "/vehicles/{vehicle_id}/energy-entries/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete energy entry",
)
async def delete_energy_entry(
    vehicle_id: UUID = Path(...),
    entry_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    unwrap(await EnergyEntryService(session).delete(vehicle_id, entry_id, current.id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
