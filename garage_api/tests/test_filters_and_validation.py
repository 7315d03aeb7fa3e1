"""Database-backed tests for the query filters, energy type change validation and entry writes."""
from datetime import date, datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.energy import EnergyEntry
from src.db.models.enums import EnergyType, EnergyUnit, EngineType, ServiceItemType
from src.db.models.maintenance import ServiceItem, ServiceRecord, ServiceType
from src.db.models.security import User
from src.db.models.vehicles import Vehicle, VehicleEnergyType
from src.schemas.energy_entries import EnergyEntryWrite
from src.services.energy_entries import EnergyEntryService
from src.services.energy_entry_filter import EnergyEntryFilterService
from src.services.engine_compatibility import VehicleEnergyCompatibilityService
from src.services.service_record_filter import ServiceRecordFilterService
from src.services.vehicle_update_validation import VehicleUpdateValidationService


async def _user(session, email):
    user = User(email=email, first_name="A", last_name="B", password_hash="x")
    session.add(user)
    await session.flush()
    return user


async def _vehicle(session, user, *types, engine=EngineType.PlugInHybrid):
    vehicle = Vehicle(
        brand="Skoda",
        model="Octavia",
        engine_type=engine,
        user_id=user.id,
        energy_types=[VehicleEnergyType(energy_type=t) for t in types],
    )
    session.add(vehicle)
    await session.flush()
    return vehicle


def _entry(vehicle, day, mileage, energy_type=EnergyType.Gasoline):
    unit = EnergyUnit.kWh if energy_type == EnergyType.Electric else EnergyUnit.Liter
    return EnergyEntry(
        vehicle_id=vehicle.id, date=day, mileage=mileage, type=energy_type, energy_unit=unit, volume=10
    )


@pytest.fixture
async def owner_vehicle(session):
    owner = await _user(session, "owner@example.com")
    vehicle = await _vehicle(session, owner, EnergyType.Gasoline, EnergyType.Electric)
    session.add_all(
        [
            _entry(vehicle, date(2024, 1, 1), 1000),
            _entry(vehicle, date(2024, 2, 1), 2000, EnergyType.Electric),
            _entry(vehicle, date(2024, 3, 1), 3000),
        ]
    )
    await session.commit()
    return owner, vehicle


class TestEnergyEntryFilter:

    async def test_default_sorting_newest_first(self, session, owner_vehicle):
        _, vehicle = owner_vehicle
        stmt = EnergyEntryFilterService.apply_vehicle_filter(select(EnergyEntry), vehicle.id)
        stmt = EnergyEntryFilterService.apply_default_sorting(stmt)
        mileages = [e.mileage for e in (await session.execute(stmt)).scalars()]
        assert mileages == [3000, 2000, 1000]

    async def test_type_filter(self, session, owner_vehicle):
        _, vehicle = owner_vehicle
        stmt = EnergyEntryFilterService.apply_energy_type_filter(select(EnergyEntry), [EnergyType.Electric])
        entries = list((await session.execute(stmt)).scalars())
        assert [e.mileage for e in entries] == [2000]

    async def test_empty_type_filter_keeps_everything(self, session, owner_vehicle):
        stmt = EnergyEntryFilterService.apply_energy_type_filter(select(EnergyEntry), [])
        assert len(list((await session.execute(stmt)).scalars())) == 3

    async def test_user_filter(self, session, owner_vehicle):
        owner, _ = owner_vehicle
        stranger = await _user(session, "stranger@example.com")
        await session.commit()

        own = EnergyEntryFilterService.apply_user_filter(select(EnergyEntry), owner.id)
        other = EnergyEntryFilterService.apply_user_filter(select(EnergyEntry), stranger.id)
        assert len(list((await session.execute(own)).scalars())) == 3
        assert list((await session.execute(other)).scalars()) == []


class TestServiceRecordFilter:

    @pytest.fixture
    async def records(self, session, owner_vehicle):
        _, vehicle = owner_vehicle
        service_type = (await session.execute(select(ServiceType).where(ServiceType.name == "Brakes"))).scalar_one()
        general = (await session.execute(select(ServiceType).where(ServiceType.name == "General"))).scalar_one()
        session.add_all(
            [
                ServiceRecord(
                    vehicle_id=vehicle.id, type_id=service_type.id, title="Front pads",
                    service_date=datetime(2024, 1, 10, tzinfo=timezone.utc), mileage=1500, manual_cost=120,
                ),
                ServiceRecord(
                    vehicle_id=vehicle.id, type_id=general.id, title="annual check",
                    notes="Brake fluid topped up",
                    service_date=datetime(2024, 3, 10, tzinfo=timezone.utc), mileage=3100, manual_cost=60,
                ),
                ServiceRecord(
                    vehicle_id=vehicle.id, type_id=general.id, title="Wipers",
                    service_date=datetime(2024, 2, 10, tzinfo=timezone.utc), mileage=2200,
                    items=[ServiceItem(name="Blade", type=ServiceItemType.Part, unit_price=20, quantity=2)],
                ),
            ]
        )
        await session.commit()
        return service_type

    async def _titles(self, session, stmt):
        return [r.title for r in (await session.execute(stmt)).scalars()]

    async def test_search_matches_title_or_notes(self, session, records):
        stmt = ServiceRecordFilterService.apply_filters(select(ServiceRecord), search_term="  BRAKE ")
        assert await self._titles(session, stmt) == ["annual check"]

    @pytest.mark.parametrize("term", ["%", "_", "Front_pads"])
    async def test_search_wildcards_match_literally(self, session, records, term):
        stmt = ServiceRecordFilterService.apply_filters(select(ServiceRecord), search_term=term)
        assert await self._titles(session, stmt) == []

    async def test_type_and_date_filters(self, session, records):
        stmt = ServiceRecordFilterService.apply_filters(select(ServiceRecord), service_type_id=records.id)
        assert await self._titles(session, stmt) == ["Front pads"]

        stmt = ServiceRecordFilterService.apply_filters(
            select(ServiceRecord),
            date_from=datetime(2024, 2, 1, tzinfo=timezone.utc),
            date_to=datetime(2024, 2, 28, tzinfo=timezone.utc),
        )
        assert await self._titles(session, stmt) == ["Wipers"]

    async def test_default_sorting(self, session, records):
        stmt = ServiceRecordFilterService.apply_default_sorting(select(ServiceRecord))
        assert await self._titles(session, stmt) == ["annual check", "Wipers", "Front pads"]

    async def test_title_sorting_is_case_insensitive(self, session, records):
        stmt = ServiceRecordFilterService.apply_sorting(select(ServiceRecord), "Title", descending=False)
        assert await self._titles(session, stmt) == ["annual check", "Front pads", "Wipers"]

    async def test_mileage_sorting(self, session, records):
        stmt = ServiceRecordFilterService.apply_sorting(select(ServiceRecord), "mileage", descending=True)
        assert await self._titles(session, stmt) == ["annual check", "Wipers", "Front pads"]

    def test_total_cost_needs_in_memory_sorting(self):
        assert ServiceRecordFilterService.requires_in_memory_sorting(" TotalCost ")
        assert not ServiceRecordFilterService.requires_in_memory_sorting("title")
        assert not ServiceRecordFilterService.requires_in_memory_sorting(None)


class TestVehicleUpdateValidation:

    async def test_adding_only(self, session, owner_vehicle):
        _, vehicle = owner_vehicle
        result = await VehicleUpdateValidationService(session).validate_energy_types_change(
            vehicle, [EnergyType.Gasoline, EnergyType.Electric, EnergyType.LPG]
        )
        assert result.is_success
        assert result.value.to_add == [EnergyType.LPG]
        assert result.value.to_remove == []

    async def test_removing_used_type_refused(self, session, owner_vehicle):
        _, vehicle = owner_vehicle
        result = await VehicleUpdateValidationService(session).validate_energy_types_change(
            vehicle, [EnergyType.Electric]
        )
        assert result.is_failure
        assert result.error.code == "Vehicles.CannotRemoveEnergyTypes"
        assert "Gasoline" in result.error.description

    async def test_removing_unused_type(self, session):
        owner = await _user(session, "lpg@example.com")
        vehicle = await _vehicle(session, owner, EnergyType.Gasoline, EnergyType.LPG, engine=EngineType.Fuel)
        session.add(_entry(vehicle, date(2024, 1, 1), 1000))
        await session.commit()

        result = await VehicleUpdateValidationService(session).validate_energy_types_change(
            vehicle, [EnergyType.Gasoline, EnergyType.Diesel]
        )
        assert result.is_success
        assert result.value.to_add == [EnergyType.Diesel]
        assert result.value.to_remove == [EnergyType.LPG]

    async def test_no_changes(self, session, owner_vehicle):
        _, vehicle = owner_vehicle
        result = await VehicleUpdateValidationService(session).validate_energy_types_change(
            vehicle, [EnergyType.Electric, EnergyType.Gasoline]
        )
        assert result.is_success
        assert not result.value.has_changes


class TestVehicleEnergyCompatibility:

    async def test_configured_types(self, session, owner_vehicle):
        _, vehicle = owner_vehicle
        service = VehicleEnergyCompatibilityService(session)
        assert await service.is_energy_type_compatible(vehicle.id, EnergyType.Electric)
        assert not await service.is_energy_type_compatible(vehicle.id, EnergyType.Diesel)
        assert await service.is_any_energy_type_compatible(vehicle.id, [EnergyType.Diesel, EnergyType.Gasoline])
        assert not await service.is_any_energy_type_compatible(vehicle.id, [EnergyType.LPG])


class TestEnergyEntryWriteFailures:

    @pytest.fixture
    def failing_commit(self, monkeypatch):
        async def _commit(self):
            raise SQLAlchemyError("database is locked")

        monkeypatch.setattr(AsyncSession, "commit", _commit)

    async def _first_entry(self, session):
        stmt = select(EnergyEntry).where(EnergyEntry.mileage == 1000)
        return (await session.execute(stmt)).scalar_one()

    async def test_update_failure_is_reported(self, session, owner_vehicle, failing_commit):
        owner, vehicle = owner_vehicle
        entry = await self._first_entry(session)
        payload = EnergyEntryWrite(
            date=date(2024, 1, 2), mileage=1100, type=EnergyType.Gasoline, energy_unit=EnergyUnit.Liter, volume=20
        )
        result = await EnergyEntryService(session).update(vehicle.id, entry.id, owner.id, payload)
        assert result.is_failure
        assert result.error.code == "EnergyEntries.UpdateFailed"

    async def test_delete_failure_is_reported(self, session, owner_vehicle, failing_commit):
        owner, vehicle = owner_vehicle
        entry = await self._first_entry(session)
        result = await EnergyEntryService(session).delete(vehicle.id, entry.id, owner.id)
        assert result.is_failure
        assert result.error.code == "EnergyEntries.DeleteFailed"
