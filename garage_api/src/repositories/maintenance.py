from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select

from src.db.models.maintenance import ServiceItem, ServiceRecord, ServiceType
from .base import BaseRepository


class ServiceTypeRepository(BaseRepository):
    """Repository for service types (reference data)."""

    async def list_types(self) -> List[ServiceType]:
        stmt = select(ServiceType).order_by(ServiceType.name)
        return list(await self.scalars(stmt))

    async def get_type(self, type_id: UUID) -> Optional[ServiceType]:
        stmt = select(ServiceType).where(ServiceType.id == type_id)
        return await self.scalar_one_or_none(stmt)


class ServiceRecordRepository(BaseRepository):
    """Repository for service records. Items and type are eagerly loaded."""

    async def get_record(self, record_id: UUID, vehicle_id: UUID) -> Optional[ServiceRecord]:
        stmt = select(ServiceRecord).where(
            ServiceRecord.id == record_id, ServiceRecord.vehicle_id == vehicle_id
        )
        return await self.scalar_one_or_none(stmt)

    async def list_for_vehicle(self, vehicle_id: UUID) -> List[ServiceRecord]:
        stmt = select(ServiceRecord).where(ServiceRecord.vehicle_id == vehicle_id)
        return list(await self.scalars(stmt))


class ServiceItemRepository(BaseRepository):
    """Repository for service record line items."""

    async def get_item(self, item_id: UUID, record_id: UUID) -> Optional[ServiceItem]:
        stmt = select(ServiceItem).where(
            ServiceItem.id == item_id, ServiceItem.service_record_id == record_id
        )
        return await self.scalar_one_or_none(stmt)
