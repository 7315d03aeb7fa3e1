from __future__ import annotations

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, ForeignKey, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.db.base import Base, TimestampMixin, UUIDPkMixin, enum_column
from src.db.models.enums import EnergyType, EnergyUnit

if TYPE_CHECKING:
    from src.db.models.vehicles import Vehicle


class EnergyEntry(UUIDPkMixin, TimestampMixin, Base):
    """Fuel fill-up or charging session logged against a vehicle."""
    __tablename__ = "energy_entries"

    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    mileage: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[EnergyType] = mapped_column(enum_column(EnergyType), nullable=False)
    energy_unit: Mapped[EnergyUnit] = mapped_column(enum_column(EnergyUnit), nullable=False)
    volume: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    cost: Mapped[Optional[float]] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    price_per_unit: Mapped[Optional[float]] = mapped_column(Numeric(12, 3, asdecimal=False), nullable=True)
    vehicle_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    vehicle: Mapped["Vehicle"] = relationship("Vehicle", back_populates="energy_entries")
