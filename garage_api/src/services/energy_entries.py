from __future__ import annotations

import logging
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import EnergyEntryErrors
from src.core.result import Result
from src.db.models.energy import EnergyEntry
from src.db.models.enums import EnergyType
from src.db.models.vehicles import Vehicle
from src.repositories.energy import EnergyEntryRepository
from src.repositories.vehicles import VehicleRepository
from src.schemas.energy_entries import EnergyEntryWrite
from src.services.base import BaseService
from src.services.energy_entry_filter import EnergyEntryFilterService
from src.services.energy_stats import EnergyStats, calculate_energy_stats
from src.services.engine_compatibility import VehicleEnergyCompatibilityService
from src.services.mileage_validator import EnergyEntryMileageValidator
from src.services.pagination import PagedList
from src.services.vehicles import load_owned_vehicle

logger = logging.getLogger(__name__)


class EnergyEntryService(BaseService):
    """Fuel and charging log of a user's vehicles."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.vehicles = VehicleRepository(session)
        self.entries = EnergyEntryRepository(session)
        self.compatibility = VehicleEnergyCompatibilityService(session)

    async def _owned_vehicle(self, vehicle_id: UUID, user_id: UUID) -> Result[Vehicle]:
        return await load_owned_vehicle(self.vehicles, vehicle_id, user_id, EnergyEntryErrors.Unauthorized)

    async def _check_write(self, candidate: EnergyEntry, payload: EnergyEntryWrite) -> Result[None]:
        if not await self.compatibility.is_energy_type_compatible(candidate.vehicle_id, payload.type):
            return Result.failure(EnergyEntryErrors.IncompatibleEnergyType(payload.type))

        siblings = await self.entries.list_for_vehicle(candidate.vehicle_id)
        if not EnergyEntryMileageValidator.is_valid(siblings, candidate, payload.date, payload.mileage):
            logger.info(
                "Rejected mileage %s on %s for vehicle %s", payload.mileage, payload.date, candidate.vehicle_id
            )
            return Result.failure(EnergyEntryErrors.IncorrectMileage)
        return Result.success()

    @staticmethod
    def _apply(entry: EnergyEntry, payload: EnergyEntryWrite) -> None:
        entry.date = payload.date
        entry.mileage = payload.mileage
        entry.type = payload.type
        entry.energy_unit = payload.energy_unit
        entry.volume = payload.volume
        entry.cost = payload.cost
        entry.price_per_unit = payload.price_per_unit

    # PUBLIC_INTERFACE
    async def create(self, vehicle_id: UUID, user_id: UUID, payload: EnergyEntryWrite) -> Result[EnergyEntry]:
        found = await self._owned_vehicle(vehicle_id, user_id)
        if found.is_failure:
            return Result.failure(found.error)

        entry = EnergyEntry(vehicle_id=vehicle_id)
        checked = await self._check_write(entry, payload)
        if checked.is_failure:
            return Result.failure(checked.error)

        self._apply(entry, payload)
        await self.entries.add(entry)
        committed = await self.commit_or(EnergyEntryErrors.CreateFailed)
        if committed.is_failure:
            return Result.failure(committed.error)
        logger.info("Logged %s entry %s for vehicle %s", entry.type.value, entry.id, vehicle_id)
        return Result.success(entry)

    # PUBLIC_INTERFACE
    async def update(
        self, vehicle_id: UUID, entry_id: UUID, user_id: UUID, payload: EnergyEntryWrite
    ) -> Result[EnergyEntry]:
        found = await self._owned_vehicle(vehicle_id, user_id)
        if found.is_failure:
            return Result.failure(found.error)
        entry = await self.entries.get_entry(entry_id, vehicle_id)
        if entry is None:
            return Result.failure(EnergyEntryErrors.NotFound(entry_id))

        checked = await self._check_write(entry, payload)
        if checked.is_failure:
            return Result.failure(checked.error)

        self._apply(entry, payload)
        committed = await self.commit_or(EnergyEntryErrors.UpdateFailed(entry_id))
        if committed.is_failure:
            return Result.failure(committed.error)
        return Result.success(entry)

    # PUBLIC_INTERFACE
    async def delete(self, vehicle_id: UUID, entry_id: UUID, user_id: UUID) -> Result[None]:
        found = await self._owned_vehicle(vehicle_id, user_id)
        if found.is_failure:
            return Result.failure(found.error)
        entry = await self.entries.get_entry(entry_id, vehicle_id)
        if entry is None:
            return Result.failure(EnergyEntryErrors.NotFound(entry_id))

        await self.entries.delete(entry)
        committed = await self.commit_or(EnergyEntryErrors.DeleteFailed(entry_id))
        if committed.is_failure:
            return committed
        logger.info("Deleted energy entry %s of vehicle %s", entry_id, vehicle_id)
        return Result.success()

    # PUBLIC_INTERFACE
    async def list_for_vehicle(
        self,
        vehicle_id: UUID,
        user_id: UUID,
        page: int,
        page_size: int,
        energy_types: Optional[Sequence[EnergyType]] = None,
    ) -> Result[PagedList[EnergyEntry]]:
        found = await self._owned_vehicle(vehicle_id, user_id)
        if found.is_failure:
            return Result.failure(found.error)

        stmt = EnergyEntryFilterService.apply_vehicle_filter(select(EnergyEntry), vehicle_id)
        stmt = EnergyEntryFilterService.apply_energy_type_filter(stmt, energy_types)
        stmt = EnergyEntryFilterService.apply_default_sorting(stmt)
        return Result.success(await PagedList.create(self.session, stmt, page, page_size))

    # PUBLIC_INTERFACE
    async def list_for_user(
        self,
        user_id: UUID,
        page: int,
        page_size: int,
        energy_types: Optional[Sequence[EnergyType]] = None,
    ) -> PagedList[EnergyEntry]:
        stmt = EnergyEntryFilterService.apply_user_filter(select(EnergyEntry), user_id)
        stmt = EnergyEntryFilterService.apply_energy_type_filter(stmt, energy_types)
        stmt = EnergyEntryFilterService.apply_default_sorting(stmt)
        return await PagedList.create(self.session, stmt, page, page_size)

    # PUBLIC_INTERFACE
    async def stats(
        self, vehicle_id: UUID, user_id: UUID, energy_types: Optional[Sequence[EnergyType]] = None
    ) -> Result[EnergyStats]:
        found = await self._owned_vehicle(vehicle_id, user_id)
        if found.is_failure:
            return Result.failure(found.error)
        entries = await self.entries.list_for_vehicle(vehicle_id)
        return Result.success(calculate_energy_stats(vehicle_id, entries, energy_types))
