from __future__ import annotations

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import Select

from src.db.models.energy import EnergyEntry
from src.db.models.enums import EnergyType
from src.db.models.vehicles import Vehicle


class EnergyEntryFilterService:
    """Composable filters and ordering for ``select(EnergyEntry)`` statements."""

    # PUBLIC_INTERFACE
    @staticmethod
    def apply_energy_type_filter(stmt: Select, energy_types: Optional[Sequence[EnergyType]]) -> Select:
        """Restrict to the given types; None or empty leaves the statement unchanged."""
        if not energy_types:
            return stmt
        return stmt.where(EnergyEntry.type.in_(list(energy_types)))

    # PUBLIC_INTERFACE
    @staticmethod
    def apply_user_filter(stmt: Select, user_id: UUID) -> Select:
        """Keep entries whose vehicle belongs to ``user_id``."""
        return stmt.join(Vehicle, Vehicle.id == EnergyEntry.vehicle_id).where(Vehicle.user_id == user_id)

    # PUBLIC_INTERFACE
    @staticmethod
    def apply_vehicle_filter(stmt: Select, vehicle_id: UUID) -> Select:
        return stmt.where(EnergyEntry.vehicle_id == vehicle_id)

    # PUBLIC_INTERFACE
    @staticmethod
    def apply_default_sorting(stmt: Select) -> Select:
        """Newest first: date descending, then mileage descending."""
        return stmt.order_by(EnergyEntry.date.desc(), EnergyEntry.mileage.desc())
