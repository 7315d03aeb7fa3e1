from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol
from uuid import UUID


class DatedMileage(Protocol):
    id: Optional[UUID]
    vehicle_id: UUID
    date: date
    mileage: int


class EnergyEntryMileageValidator:
    """
    Checks that odometer readings grow with time across a vehicle's entries.

    A candidate (date, mileage) is invalid when any other entry of the same
    vehicle is dated later with a lower mileage, or dated earlier with a
    higher mileage. Entries on the same date never conflict.
    """

    # PUBLIC_INTERFACE
    @staticmethod
    def is_valid(
        entries: Iterable[DatedMileage],
        entry_to_validate: DatedMileage,
        entry_date: date,
        mileage: int,
    ) -> bool:
        for other in entries:
            if other.vehicle_id != entry_to_validate.vehicle_id:
                continue
            if entry_to_validate.id is not None and other.id == entry_to_validate.id:
                continue
            if other.date > entry_date and other.mileage < mileage:
                return False
            if other.date < entry_date and other.mileage > mileage:
                return False
        return True
