"""
Vehicle and dashboard statistics.

The calculations are plain functions over loaded rows; ``StatisticsService``
only gathers the rows for one vehicle or for all vehicles of a user.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.energy import EnergyEntry
from src.db.models.enums import EnergyType
from src.db.models.maintenance import ServiceRecord
from src.db.models.vehicles import Vehicle
from src.repositories.energy import EnergyEntryRepository
from src.repositories.maintenance import ServiceRecordRepository
from src.repositories.vehicles import VehicleRepository
from src.services.base import BaseService, as_utc

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5
DISTANCE_PERIOD_DAYS = 30
# created_at and updated_at get separate clock reads on insert.
UPDATE_TOLERANCE = timedelta(seconds=1)


class ActivityType(str, Enum):
    VehicleAdded = "VehicleAdded"
    VehicleUpdated = "VehicleUpdated"
    ServiceAdded = "ServiceAdded"
    Refuel = "Refuel"
    Charge = "Charge"


class ContextTrend(str, Enum):
    Up = "Up"
    Down = "Down"
    Flat = "None"


class TrendMode(str, Enum):
    Good = "Good"
    Bad = "Bad"
    Neutral = "Neutral"


@dataclass
class ActivityDetail:
    label: str
    value: str


@dataclass
class VehicleActivity:
    type: ActivityType
    date: datetime
    details: List[ActivityDetail] = field(default_factory=list)


@dataclass
class TimelineActivity(VehicleActivity):
    vehicle_id: Optional[UUID] = None
    vehicle: str = ""


@dataclass
class EnergyEfficiencyStat:
    energy_type: EnergyType
    energy_unit: str
    average_consumption: float
    cost_per_km: float
    total_cost: float
    entries_count: int


@dataclass
class VehicleStats:
    vehicle_id: UUID
    total_cost: float = 0.0
    last_mileage: int = 0
    distance_traveled: int = 0
    total_fuel_cost: float = 0.0
    fuel_cost_per_km: float = 0.0
    total_fuel_entries: int = 0
    last_fuel_entry_date: Optional[date] = None
    total_services_cost: float = 0.0
    total_service_records: int = 0
    last_service_date: Optional[date] = None
    efficiency_stats: List[EnergyEfficiencyStat] = field(default_factory=list)
    vehicle_activities: List[VehicleActivity] = field(default_factory=list)


@dataclass
class StatMetric:
    value: str
    subtitle: str
    context_value: str
    context_append_text: str
    context_trend: ContextTrend
    context_trend_mode: TrendMode


@dataclass
class DashboardStats:
    fuel_expenses: StatMetric
    distance_driven: StatMetric
    recent_activity: List[TimelineActivity] = field(default_factory=list)


def _money(value: float) -> str:
    return f"{value:.2f}"


def _energy_activity_type(energy_type: EnergyType) -> ActivityType:
    return ActivityType.Charge if energy_type == EnergyType.Electric else ActivityType.Refuel


def _was_updated(created_at: datetime, updated_at: datetime) -> bool:
    return as_utc(updated_at) - as_utc(created_at) > UPDATE_TOLERANCE  # type: ignore[operator]


# PUBLIC_INTERFACE
def calculate_mileage_stats(
    entries: Sequence[EnergyEntry], records: Sequence[ServiceRecord]
) -> Tuple[int, int, int]:
    """
    (first, last, distance) over entry and record odometer readings.

    Distance is only reported when both ends are known (> 0).
    """
    readings = [e.mileage for e in entries] + [r.mileage for r in records if r.mileage is not None]
    if not readings:
        return 0, 0, 0
    first, last = min(readings), max(readings)
    distance = last - first if first > 0 and last > 0 else 0
    return first, last, distance


def _realized_distance(ordered: Sequence[EnergyEntry]) -> int:
    return max(ordered[-1].mileage - ordered[0].mileage, 0)


# PUBLIC_INTERFACE
def calculate_cost_per_distance(entries: Sequence[EnergyEntry]) -> float:
    """
    Cost actually consumed per distance unit, rounded to 2 places.

    The last fill-up (by mileage) has not been driven yet, so its cost is
    excluded. Fewer than two entries or no distance gives 0.
    """
    if len(entries) < 2:
        return 0.0
    ordered = sorted(entries, key=lambda e: e.mileage)
    distance = _realized_distance(ordered)
    if distance <= 0:
        return 0.0
    realized_cost = sum(e.cost or 0.0 for e in ordered) - (ordered[-1].cost or 0.0)
    return round(realized_cost / distance, 2)


# PUBLIC_INTERFACE
def calculate_realized_consumption(entries: Sequence[EnergyEntry]) -> float:
    """Volume consumed (all but the last fill-up) per 100 distance units, rounded to 2 places."""
    if len(entries) < 2:
        return 0.0
    ordered = sorted(entries, key=lambda e: e.mileage)
    distance = _realized_distance(ordered)
    if distance <= 0:
        return 0.0
    consumed = sum(e.volume for e in ordered[:-1])
    return round(consumed / distance * 100, 2)


# PUBLIC_INTERFACE
def calculate_efficiency_by_energy_type(entries: Sequence[EnergyEntry]) -> List[EnergyEfficiencyStat]:
    groups: Dict[EnergyType, List[EnergyEntry]] = defaultdict(list)
    for entry in entries:
        groups[entry.type].append(entry)

    return [
        EnergyEfficiencyStat(
            energy_type=energy_type,
            energy_unit=group[0].energy_unit.value,
            average_consumption=calculate_realized_consumption(group),
            cost_per_km=calculate_cost_per_distance(group),
            total_cost=sum(e.cost or 0.0 for e in group),
            entries_count=len(group),
        )
        for energy_type, group in groups.items()
    ]


# PUBLIC_INTERFACE
def calculate_trend(
    current: float, previous: float, inverse: bool, is_percentage: bool
) -> Tuple[ContextTrend, TrendMode, str]:
    """
    Direction, judgement and signed difference text of current vs previous.

    ``inverse`` marks metrics where growth is bad (spending). Percentages
    treat growth from zero as +100%.
    """
    diff = current - previous
    if current > previous:
        trend = ContextTrend.Up
        mode = TrendMode.Bad if inverse else TrendMode.Good
    elif current < previous:
        trend = ContextTrend.Down
        mode = TrendMode.Good if inverse else TrendMode.Bad
    else:
        trend, mode = ContextTrend.Flat, TrendMode.Neutral

    sign = "+" if diff > 0 else ""
    if is_percentage:
        ratio = 0.0
        if previous != 0:
            ratio = diff / previous
        elif current > 0:
            ratio = 1.0
        return trend, mode, f"{sign}{ratio:.0%}"
    diff_text = f"{diff:g}" if isinstance(diff, float) else str(diff)
    return trend, mode, f"{sign}{diff_text}"


# PUBLIC_INTERFACE
def calculate_distance_by_period(
    readings: Iterable[Tuple[UUID, date, int]], today: date
) -> Tuple[int, int]:
    """
    Distance driven in the last 30 days and in the 30 days before that.

    ``readings`` are (vehicle_id, date, mileage) triples. Per vehicle, each
    non-negative mileage step between consecutive readings (by date) is
    credited to the period of the later reading.
    """
    current_start = today - timedelta(days=DISTANCE_PERIOD_DAYS)
    previous_start = current_start - timedelta(days=DISTANCE_PERIOD_DAYS)

    by_vehicle: Dict[UUID, List[Tuple[date, int]]] = defaultdict(list)
    for vehicle_id, day, mileage in readings:
        by_vehicle[vehicle_id].append((day, mileage))

    current = previous = 0
    for points in by_vehicle.values():
        points.sort(key=lambda p: p[0])
        for (_, before), (day, after) in zip(points, points[1:]):
            step = after - before
            if step < 0:
                continue
            if day > current_start:
                current += step
            elif day > previous_start:
                previous += step
    return current, previous


def _latest(activities: List, limit: int = RECENT_ACTIVITY_LIMIT) -> List:
    return sorted(activities, key=lambda a: as_utc(a.date), reverse=True)[:limit]


def _newest(rows: Sequence, limit: int = RECENT_ACTIVITY_LIMIT) -> List:
    return sorted(rows, key=lambda r: as_utc(r.created_at), reverse=True)[:limit]


class StatisticsService(BaseService):
    """Builds vehicle and dashboard statistics for the API."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.vehicles = VehicleRepository(session)
        self.entries = EnergyEntryRepository(session)
        self.records = ServiceRecordRepository(session)

    # PUBLIC_INTERFACE
    async def get_vehicle_stats(self, vehicle: Vehicle) -> VehicleStats:
        """Aggregate mileage, costs, efficiency and recent activity of one vehicle."""
        entries = await self.entries.list_for_vehicle(vehicle.id)
        records = await self.records.list_for_vehicle(vehicle.id)

        if not entries and not records:
            return VehicleStats(vehicle_id=vehicle.id)

        _, last_mileage, distance = calculate_mileage_stats(entries, records)
        total_fuel_cost = sum(e.cost or 0.0 for e in entries)
        total_services_cost = sum(r.total_cost for r in records)
        last_service = max((as_utc(r.service_date) for r in records), default=None)

        return VehicleStats(
            vehicle_id=vehicle.id,
            total_cost=total_fuel_cost + total_services_cost,
            last_mileage=last_mileage,
            distance_traveled=distance,
            total_fuel_cost=total_fuel_cost,
            fuel_cost_per_km=calculate_cost_per_distance(entries),
            total_fuel_entries=len(entries),
            last_fuel_entry_date=max((e.date for e in entries), default=None),
            total_services_cost=total_services_cost,
            total_service_records=len(records),
            last_service_date=last_service.date() if last_service else None,
            efficiency_stats=calculate_efficiency_by_energy_type(entries),
            vehicle_activities=self._vehicle_activities(vehicle, entries, records),
        )

    def _vehicle_activities(
        self, vehicle: Vehicle, entries: Sequence[EnergyEntry], records: Sequence[ServiceRecord]
    ) -> List[VehicleActivity]:
        activities: List[VehicleActivity] = [VehicleActivity(ActivityType.VehicleAdded, vehicle.created_at)]
        if _was_updated(vehicle.created_at, vehicle.updated_at):
            activities.append(VehicleActivity(ActivityType.VehicleUpdated, vehicle.updated_at))

        for record in _newest(records):
            activities.append(
                VehicleActivity(
                    ActivityType.ServiceAdded,
                    record.created_at,
                    [ActivityDetail("Service", record.title), ActivityDetail("Cost", _money(record.total_cost))],
                )
            )
        for entry in _newest(entries):
            activities.append(
                VehicleActivity(
                    _energy_activity_type(entry.type),
                    entry.created_at,
                    [
                        ActivityDetail("Fuel Type", entry.type.value),
                        ActivityDetail("Cost", _money(entry.cost or 0.0)),
                    ],
                )
            )
        return _latest(activities)

    # PUBLIC_INTERFACE
    async def get_dashboard_stats(self, user_id: UUID, today: Optional[date] = None) -> DashboardStats:
        """Spending, distance and recent activity across all vehicles of ``user_id``."""
        today = today or self.utcnow().date()
        logger.debug("Building dashboard stats for user %s as of %s", user_id, today)
        return DashboardStats(
            fuel_expenses=await self._fuel_expenses(user_id, today),
            distance_driven=await self._distance_driven(user_id, today),
            recent_activity=await self._recent_activity(user_id),
        )

    async def _sum_cost(self, user_id: UUID, start: date, end: Optional[date] = None) -> float:
        stmt = (
            select(func.coalesce(func.sum(EnergyEntry.cost), 0))
            .join(Vehicle, Vehicle.id == EnergyEntry.vehicle_id)
            .where(Vehicle.user_id == user_id, EnergyEntry.date >= start)
        )
        if end is not None:
            stmt = stmt.where(EnergyEntry.date < end)
        result = await self.session.execute(stmt)
        return float(result.scalar_one() or 0)

    async def _fuel_expenses(self, user_id: UUID, today: date) -> StatMetric:
        month_start = today.replace(day=1)
        previous_month_start = (month_start - timedelta(days=1)).replace(day=1)

        current = await self._sum_cost(user_id, month_start)
        previous = await self._sum_cost(user_id, previous_month_start, month_start)
        trend, mode, diff_text = calculate_trend(current, previous, inverse=True, is_percentage=True)
        return StatMetric(
            value=_money(current),
            subtitle="This month",
            context_value=diff_text,
            context_append_text="vs last month",
            context_trend=trend,
            context_trend_mode=mode,
        )

    async def _distance_driven(self, user_id: UUID, today: date) -> StatMetric:
        since = today - timedelta(days=2 * DISTANCE_PERIOD_DAYS)
        stmt = (
            select(EnergyEntry.vehicle_id, EnergyEntry.date, EnergyEntry.mileage)
            .join(Vehicle, Vehicle.id == EnergyEntry.vehicle_id)
            .where(Vehicle.user_id == user_id, EnergyEntry.date >= since)
            .order_by(EnergyEntry.date, EnergyEntry.mileage)
        )
        rows = (await self.session.execute(stmt)).all()
        current, previous = calculate_distance_by_period(((r[0], r[1], r[2]) for r in rows), today)
        trend, mode, diff_text = calculate_trend(current, previous, inverse=False, is_percentage=False)
        return StatMetric(
            value=f"{current} km",
            subtitle="Last 30 days",
            context_value=f"{diff_text} km",
            context_append_text="vs previous 30 days",
            context_trend=trend,
            context_trend_mode=mode,
        )

    async def _recent_activity(self, user_id: UUID) -> List[TimelineActivity]:
        vehicles = list(await self.vehicles.scalars(self.vehicles.user_vehicles_query(user_id)))
        activities: List[TimelineActivity] = []
        for vehicle in vehicles:
            label = f"{vehicle.brand} {vehicle.model}"
            activities.append(
                TimelineActivity(ActivityType.VehicleAdded, vehicle.created_at, vehicle_id=vehicle.id, vehicle=label)
            )
            if _was_updated(vehicle.created_at, vehicle.updated_at):
                activities.append(
                    TimelineActivity(
                        ActivityType.VehicleUpdated, vehicle.updated_at, vehicle_id=vehicle.id, vehicle=label
                    )
                )

        records_stmt = (
            select(ServiceRecord, Vehicle.brand, Vehicle.model)
            .join(Vehicle, Vehicle.id == ServiceRecord.vehicle_id)
            .where(Vehicle.user_id == user_id)
            .order_by(ServiceRecord.created_at.desc())
            .limit(RECENT_ACTIVITY_LIMIT)
        )
        for record, brand, model in (await self.session.execute(records_stmt)).all():
            activities.append(
                TimelineActivity(
                    ActivityType.ServiceAdded,
                    record.created_at,
                    [ActivityDetail("Service", record.title), ActivityDetail("Cost", _money(record.total_cost))],
                    vehicle_id=record.vehicle_id,
                    vehicle=f"{brand} {model}",
                )
            )

        entries_stmt = (
            select(EnergyEntry, Vehicle.brand, Vehicle.model)
            .join(Vehicle, Vehicle.id == EnergyEntry.vehicle_id)
            .where(Vehicle.user_id == user_id)
            .order_by(EnergyEntry.created_at.desc())
            .limit(RECENT_ACTIVITY_LIMIT)
        )
        for entry, brand, model in (await self.session.execute(entries_stmt)).all():
            activities.append(
                TimelineActivity(
                    _energy_activity_type(entry.type),
                    entry.created_at,
                    [ActivityDetail("Cost", _money(entry.cost or 0.0))],
                    vehicle_id=entry.vehicle_id,
                    vehicle=f"{brand} {model}",
                )
            )

        return _latest(activities)
