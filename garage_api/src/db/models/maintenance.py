from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.db.base import Base, TimestampMixin, UUIDPkMixin, enum_column
from src.db.models.enums import ServiceItemType

if TYPE_CHECKING:
    from src.db.models.vehicles import Vehicle


class ServiceType(UUIDPkMixin, TimestampMixin, Base):
    """Category referenced by service records (oil change, brakes, ...)."""
    __tablename__ = "service_types"

    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)


class ServiceRecord(UUIDPkMixin, TimestampMixin, Base):
    """Maintenance event for a vehicle."""
    __tablename__ = "service_records"

    title: Mapped[str] = mapped_column(String(64), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    mileage: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    service_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    manual_cost: Mapped[Optional[float]] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    type_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("service_types.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    vehicle_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    type: Mapped["ServiceType"] = relationship("ServiceType", lazy="selectin")
    vehicle: Mapped["Vehicle"] = relationship("Vehicle", back_populates="service_records")
    items: Mapped[List["ServiceItem"]] = relationship(
        "ServiceItem",
        back_populates="service_record",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ServiceItem.created_at",
    )

    @property
    def total_cost(self) -> float:
        """Sum of item totals when items exist, otherwise the manual cost (or 0)."""
        if self.items:
            return sum(item.total_price for item in self.items)
        return self.manual_cost or 0.0


class ServiceItem(UUIDPkMixin, TimestampMixin, Base):
    """Billable line item of a service record."""
    __tablename__ = "service_items"

    name: Mapped[str] = mapped_column(String(128), nullable=False)
    type: Mapped[ServiceItemType] = mapped_column(enum_column(ServiceItemType), nullable=False)
    unit_price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    quantity: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    part_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    service_record_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("service_records.id", ondelete="CASCADE"), nullable=False, index=True
    )

    service_record: Mapped["ServiceRecord"] = relationship("ServiceRecord", back_populates="items")

    @property
    def total_price(self) -> float:
        return self.unit_price * self.quantity
