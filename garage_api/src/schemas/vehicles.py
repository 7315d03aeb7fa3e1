from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.db.models.enums import EnergyType, EngineType, VehicleType

MIN_MANUFACTURED_YEAR = 1886
VIN_LENGTH = 17


class VehicleBase(BaseModel):
    """Editable vehicle fields."""
    brand: str = Field(..., min_length=1, max_length=64, description="Manufacturer")
    model: str = Field(..., min_length=1, max_length=64, description="Model name")
    engine_type: EngineType = Field(..., description="Powertrain category")
    manufactured_year: Optional[int] = Field(None, description="Year of manufacture")
    type: Optional[VehicleType] = Field(None, description="Vehicle body category")
    vin: Optional[str] = Field(None, description="Vehicle identification number (17 characters)")
    energy_types: List[EnergyType] = Field(default_factory=list, description="Loggable energy types")

    @field_validator("brand", "model")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("manufactured_year")
    @classmethod
    def _year_in_range(cls, value: Optional[int]) -> Optional[int]:
        if value is None:
            return value
        current = date.today().year
        if not MIN_MANUFACTURED_YEAR <= value <= current:
            raise ValueError(f"must be between {MIN_MANUFACTURED_YEAR} and {current}")
        return value

    @field_validator("vin")
    @classmethod
    def _vin_length(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        value = value.strip().upper()
        if len(value) != VIN_LENGTH:
            raise ValueError(f"must be exactly {VIN_LENGTH} characters")
        return value

    @field_validator("energy_types")
    @classmethod
    def _dedupe(cls, value: List[EnergyType]) -> List[EnergyType]:
        return list(dict.fromkeys(value))


class VehicleCreate(VehicleBase):
    """Create vehicle payload."""


class VehicleUpdate(VehicleBase):
    """Full replacement of a vehicle's editable fields, including its energy types."""


class VehicleRead(BaseModel):
    """Vehicle read model."""
    id: UUID = Field(..., description="Vehicle ID")
    brand: str = Field(...)
    model: str = Field(...)
    engine_type: EngineType = Field(...)
    manufactured_year: Optional[int] = Field(None)
    type: Optional[VehicleType] = Field(None)
    vin: Optional[str] = Field(None)
    allowed_energy_types: List[EnergyType] = Field(default_factory=list)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class VehicleEnergyTypeCreate(BaseModel):
    """Assign an energy type to a vehicle."""
    energy_type: EnergyType = Field(...)


class VehicleEnergyTypeRead(BaseModel):
    """Energy type assigned to a vehicle."""
    id: UUID = Field(...)
    vehicle_id: UUID = Field(...)
    energy_type: EnergyType = Field(...)

    class Config:
        from_attributes = True


class SupportedEnergyTypes(BaseModel):
    """Energy types an engine can consume."""
    engine_type: EngineType = Field(...)
    energy_types: List[EnergyType] = Field(default_factory=list)
