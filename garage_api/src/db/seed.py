"""
Database seeding utilities for reference and demo data.

Seeds:
- Service types (General, OilChange, ... Other), added by name when missing
- Two demo users (password ``password123``) with five vehicles, their
  energy types, energy entries and a few service records; only on an
  empty users table

Usage:
  python -m src.db.run_migrations upgrade head
  python -m src.db.seed
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.security import get_password_hash
from src.db.models.energy import EnergyEntry
from src.db.models.enums import EnergyType, EnergyUnit, EngineType, ServiceItemType
from src.db.models.maintenance import ServiceItem, ServiceRecord, ServiceType
from src.db.models.security import User
from src.db.models.vehicles import Vehicle, VehicleEnergyType
from src.db.session import get_session_maker

logger = logging.getLogger(__name__)

SERVICE_TYPE_NAMES: List[str] = [
    "General",
    "OilChange",
    "Brakes",
    "Tires",
    "Engine",
    "Transmission",
    "Suspension",
    "Electrical",
    "Bodywork",
    "Interior",
    "Inspection",
    "Emergency",
    "Other",
]

DEMO_PASSWORD = "password123"


# PUBLIC_INTERFACE
async def seed_all() -> None:
    """Seed service types and, on an empty database, the demo users and vehicles."""
    async with get_session_maker()() as session:
        await seed_session(session)


# PUBLIC_INTERFACE
async def seed_session(session: AsyncSession) -> None:
    """Run every seeding step on ``session`` and commit."""
    service_types = await _seed_service_types(session)
    await _seed_demo_data(session, service_types)
    await session.commit()


async def _seed_service_types(session: AsyncSession) -> Dict[str, ServiceType]:
    existing = {t.name: t for t in (await session.execute(select(ServiceType))).scalars()}
    missing = [name for name in SERVICE_TYPE_NAMES if name not in existing]
    for name in missing:
        existing[name] = ServiceType(name=name)
        session.add(existing[name])
    if missing:
        await session.flush()
        logger.info("Seeded %d service types", len(missing))
    return existing


def _entry(
    vehicle: Vehicle, day: date, mileage: int, energy_type: EnergyType, unit: EnergyUnit, volume: float, **extra
) -> EnergyEntry:
    return EnergyEntry(
        vehicle_id=vehicle.id,
        date=day,
        mileage=mileage,
        type=energy_type,
        energy_unit=unit,
        volume=volume,
        **extra,
    )


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


async def _seed_demo_data(session: AsyncSession, service_types: Dict[str, ServiceType]) -> None:
    users_count = (await session.execute(select(func.count(User.id)))).scalar_one()
    if users_count:
        logger.info("Users already present; skipping demo data")
        return

    password_hash = get_password_hash(DEMO_PASSWORD)
    admin = User(email="admin@garagge.app", first_name="Jan", last_name="Kowalski", password_hash=password_hash)
    john = User(email="john.doe@garagge.app", first_name="John", last_name="Doe", password_hash=password_hash)
    session.add_all([admin, john])
    await session.flush()

    def vehicle(owner: User, brand: str, model: str, year: int, engine: EngineType, *types: EnergyType) -> Vehicle:
        return Vehicle(
            brand=brand,
            model=model,
            manufactured_year=year,
            engine_type=engine,
            user_id=owner.id,
            energy_types=[VehicleEnergyType(energy_type=t) for t in types],
        )

    corolla = vehicle(admin, "Toyota", "Corolla", 2020, EngineType.Hybrid, EnergyType.Gasoline)
    bmw = vehicle(admin, "BMW", "X5", 2021, EngineType.Fuel)
    tesla = vehicle(admin, "Tesla", "Model 3", 2019, EngineType.Electric, EnergyType.Electric)
    audi = vehicle(john, "Audi", "A4", 2022, EngineType.Fuel, EnergyType.Gasoline, EnergyType.LPG)
    mercedes = vehicle(
        john, "Mercedes-Benz", "C-Class", 2021, EngineType.PlugInHybrid, EnergyType.Gasoline, EnergyType.Electric
    )
    session.add_all([corolla, bmw, tesla, audi, mercedes])
    await session.flush()

    session.add_all(
        [
            _entry(corolla, date(2023, 1, 15), 15000, EnergyType.Gasoline, EnergyUnit.Liter, 25.5,
                   cost=50.75, price_per_unit=5.50),
            _entry(corolla, date(2023, 1, 20), 15500, EnergyType.Gasoline, EnergyUnit.Liter, 25.0),
            _entry(tesla, date(2023, 1, 18), 10000, EnergyType.Electric, EnergyUnit.kWh, 80.0, cost=150.00),
            _entry(tesla, date(2023, 1, 21), 10500, EnergyType.Electric, EnergyUnit.kWh, 80.0),
            _entry(tesla, date(2023, 1, 25), 11000, EnergyType.Electric, EnergyUnit.kWh, 80.0),
            _entry(mercedes, date(2023, 1, 25), 11000, EnergyType.Electric, EnergyUnit.kWh, 80.0),
            _entry(mercedes, date(2023, 1, 25), 11000, EnergyType.Gasoline, EnergyUnit.Liter, 30.0, cost=250.00),
        ]
    )

    session.add_all(
        [
            ServiceRecord(
                vehicle_id=corolla.id,
                type_id=service_types["OilChange"].id,
                title="Oil Change",
                service_date=_utc(2022, 1, 15),
                mileage=10000,
                items=[
                    ServiceItem(name="Engine oil 5W-30", type=ServiceItemType.Part, unit_price=12.5, quantity=4),
                    ServiceItem(name="Oil filter", type=ServiceItemType.Part, unit_price=15.0, quantity=1),
                    ServiceItem(name="Labor", type=ServiceItemType.Labor, unit_price=40.0, quantity=1),
                ],
            ),
            ServiceRecord(
                vehicle_id=corolla.id,
                type_id=service_types["General"].id,
                title="Regular Service",
                service_date=_utc(2022, 2, 10),
                mileage=11000,
                notes="Full inspection",
                manual_cost=150.00,
            ),
            ServiceRecord(
                vehicle_id=audi.id,
                type_id=service_types["Tires"].id,
                title="Winter tires",
                service_date=_utc(2022, 11, 5),
                mileage=8000,
                manual_cost=320.00,
            ),
        ]
    )
    await session.flush()
    logger.info("Seeded demo users, 5 vehicles and their history")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_all())
