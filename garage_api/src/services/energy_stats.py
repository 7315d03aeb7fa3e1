"""
Consumption and cost statistics over a vehicle's energy entries.

All functions are pure: they take already loaded entries (ORM rows or any
object exposing mileage/volume/cost/price_per_unit/type/energy_unit) and
never touch the database.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from itertools import groupby
from typing import Iterable, List, Optional, Protocol, Sequence
from uuid import UUID

from src.db.models.enums import EnergyType, EnergyUnit


class EnergyEntryLike(Protocol):
    mileage: int
    volume: float
    cost: Optional[float]
    price_per_unit: Optional[float]
    type: EnergyType
    energy_unit: EnergyUnit


@dataclass
class EnergyUnitStats:
    """Aggregates for all entries measured in one energy unit."""

    unit: EnergyUnit
    energy_types: List[EnergyType]
    entries_count: int
    total_volume: float
    total_cost: float
    average_consumption: float
    average_price_per_unit: float
    average_cost_per_100km: float


@dataclass
class EnergyStats:
    """Per-unit statistics plus totals across every unit."""

    vehicle_id: UUID
    total_entries: int = 0
    total_volume: float = 0.0
    total_cost: float = 0.0
    stats_by_unit: List[EnergyUnitStats] = field(default_factory=list)


# PUBLIC_INTERFACE
def calculate_average_consumption(entries: Sequence[EnergyEntryLike]) -> float:
    """
    Average consumption per 100 distance units.

    Entries are ordered by mileage; every consecutive pair with a positive
    distance contributes ``volume / distance * 100`` (volume of the later
    entry). Pairs with zero or negative distance are skipped. Fewer than two
    entries, or no usable pair, yields 0.
    """
    if len(entries) < 2:
        return 0.0

    ordered = sorted(entries, key=lambda e: e.mileage)
    consumptions: List[float] = []
    for previous, current in zip(ordered, ordered[1:]):
        distance = current.mileage - previous.mileage
        if distance <= 0:
            continue
        consumptions.append(current.volume / distance * 100)

    if not consumptions:
        return 0.0
    return sum(consumptions) / len(consumptions)


# PUBLIC_INTERFACE
def calculate_total_volume(entries: Iterable[EnergyEntryLike]) -> float:
    return sum((e.volume for e in entries), 0.0)


# PUBLIC_INTERFACE
def calculate_total_cost(entries: Iterable[EnergyEntryLike]) -> float:
    """Sum of known costs; entries without a cost are left out, not counted as zero."""
    return sum((e.cost for e in entries if e.cost is not None), 0.0)


# PUBLIC_INTERFACE
def calculate_average_price_per_unit(entries: Iterable[EnergyEntryLike]) -> float:
    prices = [e.price_per_unit for e in entries if e.price_per_unit is not None]
    if not prices:
        return 0.0
    return sum(prices) / len(prices)


# PUBLIC_INTERFACE
def calculate_statistics_for_unit(
    unit: EnergyUnit, entries: Optional[Sequence[EnergyEntryLike]]
) -> EnergyUnitStats:
    """
    Build the summary for one energy unit.

    Raises:
        ValueError: when ``entries`` is None.
    """
    if entries is None:
        raise ValueError("entries must not be None")

    average_consumption = calculate_average_consumption(entries)
    average_price = calculate_average_price_per_unit(entries)
    energy_types = sorted({e.type for e in entries}, key=lambda t: list(EnergyType).index(t))

    return EnergyUnitStats(
        unit=unit,
        energy_types=energy_types,
        entries_count=len(entries),
        total_volume=calculate_total_volume(entries),
        total_cost=calculate_total_cost(entries),
        average_consumption=average_consumption,
        average_price_per_unit=average_price,
        average_cost_per_100km=(average_consumption / 100) * average_price,
    )


# PUBLIC_INTERFACE
def calculate_energy_stats(
    vehicle_id: UUID,
    entries: Sequence[EnergyEntryLike],
    energy_types: Optional[Sequence[EnergyType]] = None,
) -> EnergyStats:
    """
    Group entries by unit and aggregate totals across units.

    ``energy_types`` restricts the entries considered; None or empty means all.
    """
    if energy_types:
        wanted = set(energy_types)
        entries = [e for e in entries if e.type in wanted]

    if not entries:
        return EnergyStats(vehicle_id=vehicle_id)

    unit_order = list(EnergyUnit)

    def unit_key(e: EnergyEntryLike) -> int:
        return unit_order.index(e.energy_unit)

    stats_by_unit = [
        calculate_statistics_for_unit(unit_order[key], list(group))
        for key, group in groupby(sorted(entries, key=unit_key), key=unit_key)
    ]

    return EnergyStats(
        vehicle_id=vehicle_id,
        total_entries=len(entries),
        total_volume=sum(s.total_volume for s in stats_by_unit),
        total_cost=sum(s.total_cost for s in stats_by_unit),
        stats_by_unit=stats_by_unit,
    )
