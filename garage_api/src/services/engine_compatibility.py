"""
Which energy types a powertrain can consume.

The matrix is static. ``VehicleEnergyCompatibilityService`` adds the
database-backed checks against the energy types configured on a vehicle.
"""
from __future__ import annotations

from typing import Collection, Dict, FrozenSet, Iterable, List, Optional, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import VehicleEnergyTypeErrors
from src.core.result import Result
from src.db.models.enums import EnergyType, EngineType
from src.db.models.vehicles import VehicleEnergyType
from src.services.base import BaseService

FOSSIL_ENERGY_TYPES: FrozenSet[EnergyType] = frozenset(
    {
        EnergyType.Gasoline,
        EnergyType.Diesel,
        EnergyType.LPG,
        EnergyType.CNG,
        EnergyType.Ethanol,
        EnergyType.Biofuel,
    }
)

COMPATIBILITY_MATRIX: Dict[EngineType, FrozenSet[EnergyType]] = {
    EngineType.Fuel: FOSSIL_ENERGY_TYPES,
    EngineType.Hybrid: FOSSIL_ENERGY_TYPES,
    EngineType.PlugInHybrid: FOSSIL_ENERGY_TYPES | {EnergyType.Electric},
    EngineType.Electric: frozenset({EnergyType.Electric}),
    EngineType.Hydrogen: frozenset({EnergyType.Hydrogen}),
}


def _as_engine(engine_type: Union[EngineType, str]) -> Optional[EngineType]:
    try:
        return EngineType(engine_type)
    except ValueError:
        return None


# PUBLIC_INTERFACE
def get_compatible_energy_types(engine_type: Union[EngineType, str]) -> List[EnergyType]:
    """Energy types the engine accepts, in declaration order; empty for unknown engines."""
    allowed = COMPATIBILITY_MATRIX.get(_as_engine(engine_type), frozenset())  # type: ignore[arg-type]
    return [t for t in EnergyType if t in allowed]


# PUBLIC_INTERFACE
def is_compatible(engine_type: Union[EngineType, str], energy_type: EnergyType) -> bool:
    engine = _as_engine(engine_type)
    if engine is None:
        return False
    return energy_type in COMPATIBILITY_MATRIX[engine]


# PUBLIC_INTERFACE
def validate_engine_compatibility(
    engine_type: Union[EngineType, str], energy_types: Iterable[EnergyType]
) -> Result[None]:
    """One failure per incompatible type, combined into a single Result."""
    results = [
        Result.success()
        if is_compatible(engine_type, energy_type)
        else Result.failure(VehicleEnergyTypeErrors.IncompatibleWithEngine(energy_type, engine_type))
        for energy_type in energy_types
    ]
    return Result.combine(*results)


# PUBLIC_INTERFACE
def validate_energy_type_assignment(
    vehicle_id: UUID,
    engine_type: Union[EngineType, str],
    energy_type: EnergyType,
    existing: Collection[EnergyType],
) -> Result[None]:
    """Reject duplicates (Conflict) and types the engine can't consume."""
    if energy_type in existing:
        return Result.failure(VehicleEnergyTypeErrors.AlreadyExists(vehicle_id, energy_type))
    return validate_engine_compatibility(engine_type, [energy_type])


class VehicleEnergyCompatibilityService(BaseService):
    """Checks energy types against the ones configured on a stored vehicle."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def _configured_types(self, vehicle_id: UUID) -> set[EnergyType]:
        stmt = select(VehicleEnergyType.energy_type).where(VehicleEnergyType.vehicle_id == vehicle_id)
        result = await self.session.execute(stmt)
        return set(result.scalars())

    # PUBLIC_INTERFACE
    async def is_energy_type_compatible(self, vehicle_id: UUID, energy_type: EnergyType) -> bool:
        return energy_type in await self._configured_types(vehicle_id)

    # PUBLIC_INTERFACE
    async def is_any_energy_type_compatible(
        self, vehicle_id: UUID, energy_types: Iterable[EnergyType]
    ) -> bool:
        configured = await self._configured_types(vehicle_id)
        return any(t in configured for t in energy_types)
