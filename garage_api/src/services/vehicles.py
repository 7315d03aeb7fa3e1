from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import VehicleEnergyTypeErrors, VehicleErrors
from src.core.result import Error, Result
from src.db.models.enums import EnergyType, EngineType
from src.db.models.vehicles import Vehicle, VehicleEnergyType
from src.repositories.energy import EnergyEntryRepository
from src.repositories.vehicles import VehicleRepository
from src.schemas.vehicles import VehicleCreate, VehicleUpdate
from src.services.base import BaseService
from src.services.engine_compatibility import (
    get_compatible_energy_types,
    validate_energy_type_assignment,
    validate_engine_compatibility,
)
from src.services.pagination import PagedList
from src.services.vehicle_update_validation import VehicleUpdateValidationService

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
async def load_owned_vehicle(
    vehicles: VehicleRepository,
    vehicle_id: UUID,
    user_id: UUID,
    unauthorized: Error = VehicleErrors.Unauthorized,
) -> Result[Vehicle]:
    """Fetch a vehicle and check it belongs to ``user_id``; ``unauthorized`` names the caller's domain."""
    vehicle = await vehicles.get_vehicle(vehicle_id)
    if vehicle is None:
        return Result.failure(VehicleErrors.NotFound(vehicle_id))
    if vehicle.user_id != user_id:
        logger.info("User %s denied access to vehicle %s", user_id, vehicle_id)
        return Result.failure(unauthorized)
    return Result.success(vehicle)


class VehicleService(BaseService):
    """Vehicle CRUD for the owning user, including the vehicle's energy types."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.vehicles = VehicleRepository(session)
        self.entries = EnergyEntryRepository(session)

    # PUBLIC_INTERFACE
    async def create(self, user_id: UUID, payload: VehicleCreate) -> Result[Vehicle]:
        compatible = validate_engine_compatibility(payload.engine_type, payload.energy_types)
        if compatible.is_failure:
            return Result.failure(compatible.error)

        vehicle = Vehicle(
            brand=payload.brand,
            model=payload.model,
            engine_type=payload.engine_type,
            manufactured_year=payload.manufactured_year,
            type=payload.type,
            vin=payload.vin,
            user_id=user_id,
            energy_types=[VehicleEnergyType(energy_type=t) for t in payload.energy_types],
        )
        await self.vehicles.add(vehicle)
        committed = await self.commit_or(VehicleErrors.CreateFailed)
        if committed.is_failure:
            return Result.failure(committed.error)
        logger.info("User %s created vehicle %s (%s %s)", user_id, vehicle.id, vehicle.brand, vehicle.model)
        return Result.success(vehicle)

    # PUBLIC_INTERFACE
    async def list_mine(
        self, user_id: UUID, page: int, page_size: int, search_term: Optional[str] = None
    ) -> PagedList[Vehicle]:
        stmt = self.vehicles.user_vehicles_query(user_id, search_term)
        return await PagedList.create(self.session, stmt, page, page_size)

    # PUBLIC_INTERFACE
    async def get(self, vehicle_id: UUID, user_id: UUID) -> Result[Vehicle]:
        return await load_owned_vehicle(self.vehicles, vehicle_id, user_id)

    # PUBLIC_INTERFACE
    async def update(self, vehicle_id: UUID, user_id: UUID, payload: VehicleUpdate) -> Result[Vehicle]:
        """
        Replace the vehicle's fields and energy types.

        Every requested energy type must suit the (possibly new) engine, and
        types still referenced by energy entries cannot be dropped.
        """
        found = await load_owned_vehicle(self.vehicles, vehicle_id, user_id)
        if found.is_failure:
            return found
        vehicle = found.value

        compatible = validate_engine_compatibility(payload.engine_type, payload.energy_types)
        if compatible.is_failure:
            return Result.failure(compatible.error)

        planned = await VehicleUpdateValidationService(self.session).validate_energy_types_change(
            vehicle, payload.energy_types
        )
        if planned.is_failure:
            return Result.failure(planned.error)
        plan = planned.value

        vehicle.brand = payload.brand
        vehicle.model = payload.model
        vehicle.engine_type = payload.engine_type
        vehicle.manufactured_year = payload.manufactured_year
        vehicle.type = payload.type
        vehicle.vin = payload.vin
        if plan.has_changes:
            for assigned in [vet for vet in vehicle.energy_types if vet.energy_type in plan.to_remove]:
                vehicle.energy_types.remove(assigned)
            for energy_type in plan.to_add:
                vehicle.energy_types.append(VehicleEnergyType(energy_type=energy_type))

        committed = await self.commit_or(VehicleErrors.UpdateFailed(vehicle_id))
        if committed.is_failure:
            return Result.failure(committed.error)
        logger.info(
            "Updated vehicle %s (energy types +%s -%s)",
            vehicle_id, [t.value for t in plan.to_add], [t.value for t in plan.to_remove],
        )
        return Result.success(vehicle)

    # PUBLIC_INTERFACE
    async def delete(self, vehicle_id: UUID, user_id: UUID) -> Result[None]:
        found = await load_owned_vehicle(self.vehicles, vehicle_id, user_id)
        if found.is_failure:
            return Result.failure(found.error)
        await self.vehicles.delete(found.value)
        committed = await self.commit_or(VehicleErrors.DeleteFailed(vehicle_id))
        if committed.is_success:
            logger.info("Deleted vehicle %s", vehicle_id)
        return committed

    # PUBLIC_INTERFACE
    async def add_energy_type(
        self, vehicle_id: UUID, user_id: UUID, energy_type: EnergyType
    ) -> Result[VehicleEnergyType]:
        found = await load_owned_vehicle(self.vehicles, vehicle_id, user_id)
        if found.is_failure:
            return Result.failure(found.error)
        vehicle = found.value

        allowed = validate_energy_type_assignment(
            vehicle.id, vehicle.engine_type, energy_type, vehicle.allowed_energy_types
        )
        if allowed.is_failure:
            return Result.failure(allowed.error)

        assigned = VehicleEnergyType(energy_type=energy_type)
        vehicle.energy_types.append(assigned)
        committed = await self.commit_or(VehicleErrors.UpdateFailed(vehicle_id))
        if committed.is_failure:
            return Result.failure(committed.error)
        return Result.success(assigned)

    # PUBLIC_INTERFACE
    async def remove_energy_type(self, vehicle_id: UUID, user_id: UUID, energy_type: EnergyType) -> Result[None]:
        found = await load_owned_vehicle(self.vehicles, vehicle_id, user_id)
        if found.is_failure:
            return Result.failure(found.error)
        vehicle = found.value

        assigned = next((vet for vet in vehicle.energy_types if vet.energy_type == energy_type), None)
        if assigned is None:
            return Result.failure(VehicleEnergyTypeErrors.NotFound(vehicle_id, energy_type))
        if await self.entries.count_by_types(vehicle_id, [energy_type]) > 0:
            return Result.failure(VehicleEnergyTypeErrors.DeleteFailedEntriesExists(energy_type))

        vehicle.energy_types.remove(assigned)
        return await self.commit_or(VehicleErrors.UpdateFailed(vehicle_id))

    # PUBLIC_INTERFACE
    @staticmethod
    def supported_energy_types(engine_type: EngineType) -> List[EnergyType]:
        return get_compatible_energy_types(engine_type)
