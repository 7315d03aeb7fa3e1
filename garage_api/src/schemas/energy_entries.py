from __future__ import annotations

import datetime as dt
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.db.models.enums import EnergyType, EnergyUnit


class EnergyEntryWrite(BaseModel):
    """Create/update energy entry payload."""
    date: dt.date = Field(..., description="Day of the fill-up or charge; not in the future")
    mileage: int = Field(..., gt=0, description="Odometer reading")
    type: EnergyType = Field(..., description="Energy type")
    energy_unit: EnergyUnit = Field(..., description="Unit of volume")
    volume: float = Field(..., gt=0, description="Amount of energy")
    cost: Optional[float] = Field(None, gt=0, description="Total cost")
    price_per_unit: Optional[float] = Field(None, gt=0, description="Price per unit")

    @field_validator("date")
    @classmethod
    def _not_in_future(cls, value: dt.date) -> dt.date:
        if value > dt.datetime.now(tz=dt.timezone.utc).date():
            raise ValueError("Date cannot be in the future")
        return value


class EnergyEntryRead(BaseModel):
    """Energy entry read model."""
    id: UUID = Field(...)
    vehicle_id: UUID = Field(...)
    date: dt.date = Field(...)
    mileage: int = Field(...)
    type: EnergyType = Field(...)
    energy_unit: EnergyUnit = Field(...)
    volume: float = Field(...)
    cost: Optional[float] = Field(None)
    price_per_unit: Optional[float] = Field(None)
    created_at: dt.datetime = Field(..., description="Created at")
    updated_at: dt.datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class EnergyUnitStatsRead(BaseModel):
    """Statistics for the entries measured in one unit."""
    unit: EnergyUnit = Field(...)
    energy_types: List[EnergyType] = Field(default_factory=list)
    entries_count: int = Field(...)
    total_volume: float = Field(...)
    total_cost: float = Field(...)
    average_consumption: float = Field(..., description="Per 100 distance units")
    average_price_per_unit: float = Field(...)
    average_cost_per_100km: float = Field(...)

    class Config:
        from_attributes = True


class EnergyStatsRead(BaseModel):
    """Energy statistics of one vehicle."""
    vehicle_id: UUID = Field(...)
    total_entries: int = Field(0)
    total_volume: float = Field(0.0)
    total_cost: float = Field(0.0)
    stats_by_unit: List[EnergyUnitStatsRead] = Field(default_factory=list)

    class Config:
        from_attributes = True
