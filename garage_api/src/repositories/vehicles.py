from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import Select, or_, select

from src.db.models.vehicles import Vehicle
from .base import BaseRepository


class VehicleRepository(BaseRepository):
    """Repository for vehicles and their configured energy types."""

    async def get_vehicle(self, vehicle_id: UUID) -> Optional[Vehicle]:
        stmt = select(Vehicle).where(Vehicle.id == vehicle_id)
        return await self.scalar_one_or_none(stmt)

    def user_vehicles_query(self, user_id: UUID, search_term: Optional[str] = None) -> Select:
        """Select the user's vehicles ordered by creation, optionally searching brand/model."""
        stmt = select(Vehicle).where(Vehicle.user_id == user_id)
        if search_term and search_term.strip():
            term = search_term.strip()
            stmt = stmt.where(
                or_(Vehicle.brand.icontains(term, autoescape=True), Vehicle.model.icontains(term, autoescape=True))
            )
        return stmt.order_by(Vehicle.created_at)
