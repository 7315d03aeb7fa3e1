from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from src.db.models.enums import ServiceItemType
from src.services.service_record_filter import SORTABLE_FIELDS

MAX_PAGE_SIZE = 100


class ServiceTypeRead(BaseModel):
    """Service type read model."""
    id: UUID = Field(...)
    name: str = Field(...)

    class Config:
        from_attributes = True


class ServiceItemWrite(BaseModel):
    """Create/update service item payload."""
    name: str = Field(..., min_length=1, max_length=128)
    type: ServiceItemType = Field(...)
    unit_price: float = Field(..., ge=0)
    quantity: float = Field(..., gt=0)
    part_number: Optional[str] = Field(None, max_length=64)
    notes: Optional[str] = Field(None, max_length=300)


class ServiceItemRead(BaseModel):
    """Service item read model."""
    id: UUID = Field(...)
    service_record_id: UUID = Field(...)
    name: str = Field(...)
    type: ServiceItemType = Field(...)
    unit_price: float = Field(...)
    quantity: float = Field(...)
    total_price: float = Field(..., description="unit_price x quantity")
    part_number: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)
    created_at: datetime = Field(...)
    updated_at: datetime = Field(...)

    class Config:
        from_attributes = True


class ServiceRecordBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=64)
    notes: Optional[str] = Field(None, max_length=500)
    mileage: Optional[int] = Field(None, ge=0)
    service_date: datetime = Field(..., description="When the service happened; not in the future")
    manual_cost: Optional[float] = Field(None, ge=0, description="Used when the record has no items")
    type_id: UUID = Field(..., description="Service type")

    @field_validator("service_date")
    @classmethod
    def _not_in_future(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        if value > datetime.now(tz=timezone.utc):
            raise ValueError("must not be in the future")
        return value


class ServiceRecordCreate(ServiceRecordBase):
    """Create service record payload, optionally with its items."""
    items: List[ServiceItemWrite] = Field(default_factory=list)


class ServiceRecordUpdate(ServiceRecordBase):
    """Update service record payload. Items are edited through their own endpoints."""


class ServiceRecordRead(BaseModel):
    """Service record read model."""
    id: UUID = Field(...)
    vehicle_id: UUID = Field(...)
    title: str = Field(...)
    notes: Optional[str] = Field(None)
    mileage: Optional[int] = Field(None)
    service_date: datetime = Field(...)
    manual_cost: Optional[float] = Field(None)
    total_cost: float = Field(..., description="Sum of item totals, else manual cost")
    type_id: UUID = Field(...)
    type_name: Optional[str] = Field(None)
    items: List[ServiceItemRead] = Field(default_factory=list)
    created_at: datetime = Field(...)
    updated_at: datetime = Field(...)


# PUBLIC_INTERFACE
class ServiceRecordQuery(BaseModel):
    """Paging, filtering and sorting options for a vehicle's service records."""
    page: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1, le=MAX_PAGE_SIZE)
    search_term: Optional[str] = Field(None, max_length=100)
    service_type_id: Optional[UUID] = Field(None)
    date_from: Optional[datetime] = Field(None)
    date_to: Optional[datetime] = Field(None)
    sort_by: Optional[str] = Field(None)
    sort_descending: bool = Field(True)

    @field_validator("sort_by")
    @classmethod
    def _known_sort_field(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        normalized = value.strip().lower()
        if normalized not in SORTABLE_FIELDS:
            raise ValueError(f"must be one of: {', '.join(SORTABLE_FIELDS)}")
        return normalized

    @field_validator("date_from", "date_to")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _date_range(self) -> "ServiceRecordQuery":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must be on or before date_to")
        return self
