from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import VehicleErrors
from src.core.result import Result
from src.db.models.enums import EnergyType
from src.db.models.vehicles import Vehicle
from src.repositories.energy import EnergyEntryRepository
from src.services.base import BaseService

logger = logging.getLogger(__name__)


def _ordered(types: Iterable[EnergyType]) -> List[EnergyType]:
    wanted = set(types)
    return [t for t in EnergyType if t in wanted]


@dataclass
class EnergyTypeChangePlan:
    """Energy types to add to and remove from a vehicle."""

    to_add: List[EnergyType] = field(default_factory=list)
    to_remove: List[EnergyType] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.to_add or self.to_remove)


class VehicleUpdateValidationService(BaseService):
    """
    Validates replacing a vehicle's energy types.

    Removing a type is refused while energy entries of that type exist for
    the vehicle; the error names the conflicting types and the entry count.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.entries = EnergyEntryRepository(session)

    # PUBLIC_INTERFACE
    async def validate_energy_types_change(
        self, vehicle: Vehicle, requested: Iterable[EnergyType]
    ) -> Result[EnergyTypeChangePlan]:
        current = set(vehicle.allowed_energy_types)
        requested_set = set(requested)

        plan = EnergyTypeChangePlan(
            to_add=_ordered(requested_set - current),
            to_remove=_ordered(current - requested_set),
        )
        if not plan.has_changes or not plan.to_remove:
            return Result.success(plan)

        conflicting = await self.entries.conflicting_types(vehicle.id, plan.to_remove)
        if conflicting:
            count = await self.entries.count_by_types(vehicle.id, conflicting)
            logger.info(
                "Refusing to remove energy types %s from vehicle %s: %d entries",
                [t.value for t in conflicting], vehicle.id, count,
            )
            return Result.failure(VehicleErrors.CannotRemoveEnergyTypes(conflicting, count))

        return Result.success(plan)
