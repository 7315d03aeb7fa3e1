from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.results import unwrap
from src.core.deps import CurrentUser, get_current_user
from src.db.models.maintenance import ServiceRecord
from src.db.session import get_async_session
from src.schemas.common import PagedResponse
from src.schemas.service_records import (
    ServiceItemRead,
    ServiceItemWrite,
    ServiceRecordCreate,
    ServiceRecordQuery,
    ServiceRecordRead,
    ServiceRecordUpdate,
    ServiceTypeRead,
)
from src.services.service_records import ServiceRecordService

router = APIRouter(tags=["Service Records"])

_RECORD = "/vehicles/{vehicle_id}/service-records/{record_id}"


def _record_to_read(record: ServiceRecord) -> ServiceRecordRead:
    return ServiceRecordRead(
        id=record.id,
        vehicle_id=record.vehicle_id,
        title=record.title,
        notes=record.notes,
        mileage=record.mileage,
        service_date=record.service_date,
        manual_cost=record.manual_cost,
        total_cost=record.total_cost,
        type_id=record.type_id,
        type_name=record.type.name if record.type else None,
        items=[ServiceItemRead.model_validate(item) for item in record.items],
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


# PUBLIC_INTERFACE
def get_service_record_query(
    page: int = Query(1),
    page_size: int = Query(10, alias="pageSize"),
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    service_type_id: Optional[UUID] = Query(None, alias="serviceTypeId"),
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="servicedate, totalcost, mileage or title"),
    sort_descending: bool = Query(True, alias="sortDescending"),
) -> ServiceRecordQuery:
    """Collect list options from the query string and validate them as one object."""
    try:
        return ServiceRecordQuery(
            page=page,
            page_size=page_size,
            search_term=search_term,
            service_type_id=service_type_id,
            date_from=date_from,
            date_to=date_to,
            sort_by=sort_by,
            sort_descending=sort_descending,
        )
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False, include_context=False)) from exc


# PUBLIC_INTERFACE
@router.get(
    "/service-types",
    response_model=List[ServiceTypeRead],
    summary="List service types",
)
async def list_service_types(
    _: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> List[ServiceTypeRead]:
    return [ServiceTypeRead.model_validate(t) for t in await ServiceRecordService(session).list_types()]


# PUBLIC_INTERFACE
@router.post(
    "/vehicles/{vehicle_id}/service-records",
    response_model=ServiceRecordRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create service record",
    description="Add a maintenance event to a vehicle, optionally with its line items.",
)
async def create_service_record(
    payload: ServiceRecordCreate,
    vehicle_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> ServiceRecordRead:
    record = unwrap(await ServiceRecordService(session).create(vehicle_id, current.id, payload))
    return _record_to_read(record)


# PUBLIC_INTERFACE
@router.get(
    "/vehicles/{vehicle_id}/service-records",
    response_model=PagedResponse[ServiceRecordRead],
    summary="List service records",
    description="Paged, filterable and sortable maintenance history of a vehicle.",
)
async def list_service_records(
    vehicle_id: UUID = Path(...),
    query: ServiceRecordQuery = Depends(get_service_record_query),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> PagedResponse[ServiceRecordRead]:
    paged = unwrap(await ServiceRecordService(session).list_records(vehicle_id, current.id, query))
    return PagedResponse[ServiceRecordRead].from_paged(paged, _record_to_read)


# PUBLIC_INTERFACE
@router.get(_RECORD, response_model=ServiceRecordRead, summary="Get service record")
async def get_service_record(
    vehicle_id: UUID = Path(...),
    record_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> ServiceRecordRead:
    return _record_to_read(unwrap(await ServiceRecordService(session).get(vehicle_id, record_id, current.id)))


# PUBLIC_INTERFACE
@router.put(_RECORD, response_model=ServiceRecordRead, summary="Update service record")
async def update_service_record(
    payload: ServiceRecordUpdate,
    vehicle_id: UUID = Path(...),
    record_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> ServiceRecordRead:
    record = unwrap(await ServiceRecordService(session).update(vehicle_id, record_id, current.id, payload))
    return _record_to_read(record)


# PUBLIC_INTERFACE
@router.delete(_RECORD, status_code=status.HTTP_204_NO_CONTENT, summary="Delete service record")
async def delete_service_record(
    vehicle_id: UUID = Path(...),
    record_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    unwrap(await ServiceRecordService(session).delete(vehicle_id, record_id, current.id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# PUBLIC_INTERFACE
@router.post(
    _RECORD + "/items",
    response_model=ServiceItemRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add service item",
)
async def create_service_item(
    payload: ServiceItemWrite,
    vehicle_id: UUID = Path(...),
    record_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> ServiceItemRead:
    item = unwrap(await ServiceRecordService(session).add_item(vehicle_id, record_id, current.id, payload))
    return ServiceItemRead.model_validate(item)


# PUBLIC_INTERFACE
@router.put(_RECORD + "/items/{item_id}", response_model=ServiceItemRead, summary="Update service item")
async def update_service_item(
    payload: ServiceItemWrite,
    vehicle_id: UUID = Path(...),
    record_id: UUID = Path(...),
    item_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> ServiceItemRead:
    item = unwrap(
        await ServiceRecordService(session).update_item(vehicle_id, record_id, item_id, current.id, payload)
    )
    return ServiceItemRead.model_validate(item)


# PUBLIC_INTERFACE
@router.delete(_RECORD + "/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete service item")
async def delete_service_item(
    vehicle_id: UUID = Path(...),
    record_id: UUID = Path(...),
    item_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    unwrap(await ServiceRecordService(session).delete_item(vehicle_id, record_id, item_id, current.id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
