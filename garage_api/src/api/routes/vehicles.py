from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.results import unwrap
from src.core.deps import CurrentUser, get_current_user
from src.db.models.enums import EnergyType, EngineType
from src.db.session import get_async_session
from src.schemas.common import PagedResponse
from src.schemas.vehicles import (
    SupportedEnergyTypes,
    VehicleCreate,
    VehicleEnergyTypeCreate,
    VehicleEnergyTypeRead,
    VehicleRead,
    VehicleUpdate,
)
from src.services.vehicles import VehicleService

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=VehicleRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create vehicle",
    description="Create a vehicle for the current user. Energy types must suit the engine.",
)
async def create_vehicle(
    payload: VehicleCreate,
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> VehicleRead:
    vehicle = unwrap(await VehicleService(session).create(current.id, payload))
    return VehicleRead.model_validate(vehicle)


# PUBLIC_INTERFACE
@router.get(
    "/my",
    response_model=PagedResponse[VehicleRead],
    summary="List my vehicles",
    description="Paged list of the current user's vehicles, optionally searching brand or model.",
)
async def list_my_vehicles(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    search_term: Optional[str] = Query(None, max_length=32, alias="searchTerm"),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> PagedResponse[VehicleRead]:
    paged = await VehicleService(session).list_mine(current.id, page, page_size, search_term)
    return PagedResponse[VehicleRead].from_paged(paged, VehicleRead.model_validate)


# PUBLIC_INTERFACE
@router.get(
    "/energy-types/supported",
    response_model=SupportedEnergyTypes,
    summary="Supported energy types",
    description="Energy types an engine type can consume.",
)
async def supported_energy_types(
    engine_type: EngineType = Query(..., alias="engineType"),
) -> SupportedEnergyTypes:
    return SupportedEnergyTypes(
        engine_type=engine_type,
        energy_types=VehicleService.supported_energy_types(engine_type),
    )


# PUBLIC_INTERFACE
@router.get("/{vehicle_id}", response_model=VehicleRead, summary="Get vehicle")
async def get_vehicle(
    vehicle_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> VehicleRead:
    return VehicleRead.model_validate(unwrap(await VehicleService(session).get(vehicle_id, current.id)))


# PUBLIC_INTERFACE
@router.put(
    "/{vehicle_id}",
    response_model=VehicleRead,
    summary="Update vehicle",
    description=(
        "Replace the vehicle's fields and energy types. Energy types still used by "
        "energy entries cannot be removed."
    ),
)
async def update_vehicle(
    payload: VehicleUpdate,
    vehicle_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> VehicleRead:
    vehicle = unwrap(await VehicleService(session).update(vehicle_id, current.id, payload))
    return VehicleRead.model_validate(vehicle)


# PUBLIC_INTERFACE
@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete vehicle")
async def delete_vehicle(
    vehicle_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    unwrap(await VehicleService(session).delete(vehicle_id, current.id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# PUBLIC_INTERFACE
@router.post(
    "/{vehicle_id}/energy-types",
    response_model=VehicleEnergyTypeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add energy type",
)
async def add_energy_type(
    payload: VehicleEnergyTypeCreate,
    vehicle_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> VehicleEnergyTypeRead:
    assigned = unwrap(await VehicleService(session).add_energy_type(vehicle_id, current.id, payload.energy_type))
    return VehicleEnergyTypeRead.model_validate(assigned)


# PUBLIC_INTERFACE
@router.delete(
    "/{vehicle_id}/energy-types/{energy_type}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove energy type",
    description="Refused while energy entries of that type exist.",
)
async def remove_energy_type(
    vehicle_id: UUID = Path(...),
    energy_type: EnergyType = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    unwrap(await VehicleService(session).remove_energy_type(vehicle_id, current.id, energy_type))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
