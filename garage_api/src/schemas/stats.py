from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.db.models.enums import EnergyType
from src.services.statistics import ActivityType, ContextTrend, TrendMode


class ActivityDetailRead(BaseModel):
    label: str = Field(...)
    value: str = Field(...)

    class Config:
        from_attributes = True


class VehicleActivityRead(BaseModel):
    """Entry of a vehicle's activity feed."""
    type: ActivityType = Field(...)
    date: datetime = Field(...)
    details: List[ActivityDetailRead] = Field(default_factory=list)

    class Config:
        from_attributes = True


class TimelineActivityRead(VehicleActivityRead):
    """Dashboard activity entry, labelled with its vehicle."""
    vehicle_id: Optional[UUID] = Field(None)
    vehicle: str = Field("", description="Brand and model")


class EnergyEfficiencyStatRead(BaseModel):
    energy_type: EnergyType = Field(...)
    energy_unit: str = Field(...)
    average_consumption: float = Field(..., description="Volume per 100 distance units")
    cost_per_km: float = Field(...)
    total_cost: float = Field(...)
    entries_count: int = Field(...)

    class Config:
        from_attributes = True


class VehicleStatsRead(BaseModel):
    """Aggregated statistics of one vehicle."""
    vehicle_id: UUID = Field(...)
    total_cost: float = Field(..., description="Energy plus service spending")
    last_mileage: int = Field(...)
    distance_traveled: int = Field(...)
    total_fuel_cost: float = Field(...)
    fuel_cost_per_km: float = Field(...)
    total_fuel_entries: int = Field(...)
    last_fuel_entry_date: Optional[date] = Field(None)
    total_services_cost: float = Field(...)
    total_service_records: int = Field(...)
    last_service_date: Optional[date] = Field(None)
    efficiency_stats: List[EnergyEfficiencyStatRead] = Field(default_factory=list)
    vehicle_activities: List[VehicleActivityRead] = Field(default_factory=list)

    class Config:
        from_attributes = True


class StatMetricRead(BaseModel):
    value: str = Field(...)
    subtitle: str = Field(...)
    context_value: str = Field(..., description="Signed change against the previous period")
    context_append_text: str = Field(...)
    context_trend: ContextTrend = Field(...)
    context_trend_mode: TrendMode = Field(...)

    class Config:
        from_attributes = True


class DashboardStatsRead(BaseModel):
    """Dashboard cards for the current user."""
    fuel_expenses: StatMetricRead = Field(...)
    distance_driven: StatMetricRead = Field(...)
    recent_activity: List[TimelineActivityRead] = Field(default_factory=list)

    class Config:
        from_attributes = True
