from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.db.base import Base, TimestampMixin, UUIDPkMixin, enum_column
from src.db.models.enums import EnergyType, EngineType, VehicleType

if TYPE_CHECKING:
    from src.db.models.energy import EnergyEntry
    from src.db.models.maintenance import ServiceRecord
    from src.db.models.security import User


class Vehicle(UUIDPkMixin, TimestampMixin, Base):
    """A user's vehicle; owns energy entries, service records and energy types."""
    __tablename__ = "vehicles"

    brand: Mapped[str] = mapped_column(String(64), nullable=False)
    model: Mapped[str] = mapped_column(String(64), nullable=False)
    engine_type: Mapped[EngineType] = mapped_column(enum_column(EngineType), nullable=False)
    manufactured_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    type: Mapped[Optional[VehicleType]] = mapped_column(enum_column(VehicleType), nullable=True)
    vin: Mapped[Optional[str]] = mapped_column(String(17), nullable=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user: Mapped["User"] = relationship("User", back_populates="vehicles")
    energy_types: Mapped[List["VehicleEnergyType"]] = relationship(
        "VehicleEnergyType",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    energy_entries: Mapped[List["EnergyEntry"]] = relationship(
        "EnergyEntry",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    service_records: Mapped[List["ServiceRecord"]] = relationship(
        "ServiceRecord",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def allowed_energy_types(self) -> List[EnergyType]:
        return [vet.energy_type for vet in self.energy_types]


class VehicleEnergyType(UUIDPkMixin, TimestampMixin, Base):
    """Energy type that may be logged for a vehicle."""
    __tablename__ = "vehicle_energy_types"
    __table_args__ = (
        UniqueConstraint("vehicle_id", "energy_type", name="uq_vehicle_energy_types_vehicle_type"),
    )

    vehicle_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    energy_type: Mapped[EnergyType] = mapped_column(enum_column(EnergyType), nullable=False)

    vehicle: Mapped["Vehicle"] = relationship("Vehicle", back_populates="energy_types")
