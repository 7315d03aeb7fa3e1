from __future__ import annotations

import logging
from typing import List, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ServiceItemErrors, ServiceRecordErrors
from src.core.result import Error, Result
from src.db.models.maintenance import ServiceItem, ServiceRecord, ServiceType
from src.repositories.maintenance import (
    ServiceItemRepository,
    ServiceRecordRepository,
    ServiceTypeRepository,
)
from src.repositories.vehicles import VehicleRepository
from src.schemas.service_records import (
    ServiceItemWrite,
    ServiceRecordCreate,
    ServiceRecordQuery,
    ServiceRecordUpdate,
)
from src.services.base import BaseService
from src.services.pagination import PagedList
from src.services.service_record_filter import ServiceRecordFilterService
from src.services.vehicles import load_owned_vehicle

logger = logging.getLogger(__name__)


def _new_item(payload: ServiceItemWrite) -> ServiceItem:
    return ServiceItem(
        name=payload.name,
        type=payload.type,
        unit_price=payload.unit_price,
        quantity=payload.quantity,
        part_number=payload.part_number,
        notes=payload.notes,
    )


class ServiceRecordService(BaseService):
    """Maintenance history of a user's vehicles: records, their items and service types."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.vehicles = VehicleRepository(session)
        self.types = ServiceTypeRepository(session)
        self.records = ServiceRecordRepository(session)
        self.items = ServiceItemRepository(session)

    # PUBLIC_INTERFACE
    async def list_types(self) -> List[ServiceType]:
        return await self.types.list_types()

    async def _owned_record(
        self, vehicle_id: UUID, record_id: UUID, user_id: UUID, unauthorized: Error
    ) -> Result[ServiceRecord]:
        found = await load_owned_vehicle(self.vehicles, vehicle_id, user_id, unauthorized)
        if found.is_failure:
            return Result.failure(found.error)
        record = await self.records.get_record(record_id, vehicle_id)
        if record is None:
            return Result.failure(ServiceRecordErrors.NotFound(record_id))
        return Result.success(record)

    async def _service_type(self, type_id: UUID) -> Result[ServiceType]:
        service_type = await self.types.get_type(type_id)
        if service_type is None:
            return Result.failure(ServiceRecordErrors.ServiceTypeNotFound(type_id))
        return Result.success(service_type)

    # PUBLIC_INTERFACE
    async def create(self, vehicle_id: UUID, user_id: UUID, payload: ServiceRecordCreate) -> Result[ServiceRecord]:
        found = await load_owned_vehicle(self.vehicles, vehicle_id, user_id, ServiceRecordErrors.Unauthorized)
        if found.is_failure:
            return Result.failure(found.error)
        typed = await self._service_type(payload.type_id)
        if typed.is_failure:
            return Result.failure(typed.error)

        record = ServiceRecord(
            vehicle_id=vehicle_id,
            type_id=payload.type_id,
            type=typed.value,
            title=payload.title,
            notes=payload.notes,
            mileage=payload.mileage,
            service_date=payload.service_date,
            manual_cost=payload.manual_cost,
            items=[_new_item(item) for item in payload.items],
        )
        await self.records.add(record)
        committed = await self.commit_or(ServiceRecordErrors.CreateFailed)
        if committed.is_failure:
            return Result.failure(committed.error)
        logger.info("Added service record %s with %d items to vehicle %s", record.id, len(record.items), vehicle_id)
        return Result.success(record)

    # PUBLIC_INTERFACE
    async def list_records(
        self, vehicle_id: UUID, user_id: UUID, query: ServiceRecordQuery
    ) -> Result[PagedList[ServiceRecord]]:
        """
        Filtered, sorted page of a vehicle's records.

        Sorting by total cost happens in memory over every matching record,
        since the total is derived from the items.
        """
        found = await load_owned_vehicle(self.vehicles, vehicle_id, user_id, ServiceRecordErrors.Unauthorized)
        if found.is_failure:
            return Result.failure(found.error)

        stmt = select(ServiceRecord).where(ServiceRecord.vehicle_id == vehicle_id)
        stmt = ServiceRecordFilterService.apply_filters(
            stmt,
            search_term=query.search_term,
            service_type_id=query.service_type_id,
            date_from=query.date_from,
            date_to=query.date_to,
        )
        stmt = ServiceRecordFilterService.apply_sorting(stmt, query.sort_by, query.sort_descending)

        if not ServiceRecordFilterService.requires_in_memory_sorting(query.sort_by):
            return Result.success(await PagedList.create(self.session, stmt, query.page, query.page_size))

        rows = list(await self.records.scalars(stmt))
        rows.sort(key=lambda r: r.total_cost, reverse=query.sort_descending)
        return Result.success(PagedList.from_sequence(rows, query.page, query.page_size))

    # PUBLIC_INTERFACE
    async def get(self, vehicle_id: UUID, record_id: UUID, user_id: UUID) -> Result[ServiceRecord]:
        return await self._owned_record(vehicle_id, record_id, user_id, ServiceRecordErrors.Unauthorized)

    # PUBLIC_INTERFACE
    async def update(
        self, vehicle_id: UUID, record_id: UUID, user_id: UUID, payload: ServiceRecordUpdate
    ) -> Result[ServiceRecord]:
        found = await self._owned_record(vehicle_id, record_id, user_id, ServiceRecordErrors.Unauthorized)
        if found.is_failure:
            return found
        record = found.value

        if payload.type_id != record.type_id:
            typed = await self._service_type(payload.type_id)
            if typed.is_failure:
                return Result.failure(typed.error)
            record.type_id = payload.type_id
            record.type = typed.value

        record.title = payload.title
        record.notes = payload.notes
        record.mileage = payload.mileage
        record.service_date = payload.service_date
        record.manual_cost = payload.manual_cost

        committed = await self.commit_or(ServiceRecordErrors.UpdateFailed(record_id))
        if committed.is_failure:
            return Result.failure(committed.error)
        return Result.success(record)

    # PUBLIC_INTERFACE
    async def delete(self, vehicle_id: UUID, record_id: UUID, user_id: UUID) -> Result[None]:
        found = await self._owned_record(vehicle_id, record_id, user_id, ServiceRecordErrors.Unauthorized)
        if found.is_failure:
            return Result.failure(found.error)
        await self.records.delete(found.value)
        committed = await self.commit_or(ServiceRecordErrors.DeleteFailed(record_id))
        if committed.is_success:
            logger.info("Deleted service record %s of vehicle %s", record_id, vehicle_id)
        return committed

    # PUBLIC_INTERFACE
    async def add_item(
        self, vehicle_id: UUID, record_id: UUID, user_id: UUID, payload: ServiceItemWrite
    ) -> Result[ServiceItem]:
        found = await self._owned_record(vehicle_id, record_id, user_id, ServiceItemErrors.Unauthorized)
        if found.is_failure:
            return Result.failure(found.error)

        item = _new_item(payload)
        found.value.items.append(item)
        committed = await self.commit_or(ServiceItemErrors.CreateFailed)
        if committed.is_failure:
            return Result.failure(committed.error)
        return Result.success(item)

    async def _owned_item(
        self, vehicle_id: UUID, record_id: UUID, item_id: UUID, user_id: UUID
    ) -> Result[Tuple[ServiceRecord, ServiceItem]]:
        found = await self._owned_record(vehicle_id, record_id, user_id, ServiceItemErrors.Unauthorized)
        if found.is_failure:
            return Result.failure(found.error)
        item = await self.items.get_item(item_id, record_id)
        if item is None:
            return Result.failure(ServiceItemErrors.NotFound(item_id))
        return Result.success((found.value, item))

    # PUBLIC_INTERFACE
    async def update_item(
        self, vehicle_id: UUID, record_id: UUID, item_id: UUID, user_id: UUID, payload: ServiceItemWrite
    ) -> Result[ServiceItem]:
        found = await self._owned_item(vehicle_id, record_id, item_id, user_id)
        if found.is_failure:
            return Result.failure(found.error)
        _, item = found.value

        item.name = payload.name
        item.type = payload.type
        item.unit_price = payload.unit_price
        item.quantity = payload.quantity
        item.part_number = payload.part_number
        item.notes = payload.notes

        committed = await self.commit_or(ServiceItemErrors.UpdateFailed(item_id))
        if committed.is_failure:
            return Result.failure(committed.error)
        return Result.success(item)

    # PUBLIC_INTERFACE
    async def delete_item(self, vehicle_id: UUID, record_id: UUID, item_id: UUID, user_id: UUID) -> Result[None]:
        found = await self._owned_item(vehicle_id, record_id, item_id, user_id)
        if found.is_failure:
            return Result.failure(found.error)
        record, item = found.value

        record.items.remove(item)
        return await self.commit_or(ServiceItemErrors.DeleteFailed(item_id))
