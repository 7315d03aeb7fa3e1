from __future__ import annotations

from typing import Collection, List, Optional
from uuid import UUID

from sqlalchemy import func, select

from src.db.models.energy import EnergyEntry
from src.db.models.enums import EnergyType
from .base import BaseRepository


class EnergyEntryRepository(BaseRepository):
    """Repository for fuel and charging entries."""

    async def get_entry(self, entry_id: UUID, vehicle_id: UUID) -> Optional[EnergyEntry]:
        stmt = select(EnergyEntry).where(
            EnergyEntry.id == entry_id, EnergyEntry.vehicle_id == vehicle_id
        )
        return await self.scalar_one_or_none(stmt)

    async def list_for_vehicle(self, vehicle_id: UUID) -> List[EnergyEntry]:
        stmt = (
            select(EnergyEntry)
            .where(EnergyEntry.vehicle_id == vehicle_id)
            .order_by(EnergyEntry.mileage)
        )
        return list(await self.scalars(stmt))

    async def count_by_types(self, vehicle_id: UUID, energy_types: Collection[EnergyType]) -> int:
        if not energy_types:
            return 0
        stmt = select(func.count(EnergyEntry.id)).where(
            EnergyEntry.vehicle_id == vehicle_id,
            EnergyEntry.type.in_(list(energy_types)),
        )
        result = await self.execute(stmt)
        return int(result.scalar_one())

    async def conflicting_types(
        self, vehicle_id: UUID, energy_types: Collection[EnergyType]
    ) -> List[EnergyType]:
        """Return the subset of ``energy_types`` that already have entries, in enum order."""
        if not energy_types:
            return []
        stmt = (
            select(EnergyEntry.type)
            .where(
                EnergyEntry.vehicle_id == vehicle_id,
                EnergyEntry.type.in_(list(energy_types)),
            )
            .distinct()
        )
        found = set(await self.scalars(stmt))
        return [t for t in EnergyType if t in found]
