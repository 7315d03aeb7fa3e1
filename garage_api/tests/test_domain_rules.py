"""Tests for mileage ordering, engine compatibility and the Result type."""
import uuid
from datetime import date

import pytest

from src.core.errors import VehicleEnergyTypeErrors
from src.core.result import Error, ErrorType, Result, ValidationError
from src.db.models.energy import EnergyEntry
from src.db.models.enums import EnergyType, EnergyUnit, EngineType
from src.services.engine_compatibility import (
    get_compatible_energy_types,
    is_compatible,
    validate_energy_type_assignment,
    validate_engine_compatibility,
)
from src.services.mileage_validator import EnergyEntryMileageValidator

VEHICLE_ID = uuid.uuid4()


def entry(day, mileage, vehicle_id=VEHICLE_ID, entry_id=None):
    return EnergyEntry(
        id=entry_id or uuid.uuid4(),
        vehicle_id=vehicle_id,
        date=day,
        mileage=mileage,
        type=EnergyType.Gasoline,
        energy_unit=EnergyUnit.Liter,
        volume=10,
    )


class TestMileageValidator:
    existing = [entry(date(2024, 1, 10), 1000), entry(date(2024, 2, 10), 2000)]

    def candidate(self):
        return EnergyEntry(vehicle_id=VEHICLE_ID)

    def test_between_neighbours(self):
        assert EnergyEntryMileageValidator.is_valid(self.existing, self.candidate(), date(2024, 1, 20), 1500)

    def test_later_date_lower_mileage(self):
        assert not EnergyEntryMileageValidator.is_valid(self.existing, self.candidate(), date(2024, 3, 1), 1900)

    def test_earlier_date_higher_mileage(self):
        assert not EnergyEntryMileageValidator.is_valid(self.existing, self.candidate(), date(2024, 1, 1), 1100)

    def test_same_date_never_conflicts(self):
        assert EnergyEntryMileageValidator.is_valid(self.existing, self.candidate(), date(2024, 1, 10), 5)

    def test_other_vehicles_ignored(self):
        others = [entry(date(2024, 1, 1), 90000, vehicle_id=uuid.uuid4())]
        assert EnergyEntryMileageValidator.is_valid(others, self.candidate(), date(2024, 2, 1), 100)

    def test_entry_being_updated_is_skipped(self):
        current = self.existing[1]
        assert EnergyEntryMileageValidator.is_valid(self.existing, current, date(2024, 2, 10), 1200)


class TestEngineCompatibility:

    def test_electric_only_accepts_electric(self):
        assert get_compatible_energy_types(EngineType.Electric) == [EnergyType.Electric]

    def test_plug_in_hybrid_accepts_fossil_and_electric(self):
        allowed = get_compatible_energy_types(EngineType.PlugInHybrid)
        assert EnergyType.Electric in allowed
        assert EnergyType.Diesel in allowed
        assert EnergyType.Hydrogen not in allowed

    def test_fuel_rejects_electric(self):
        assert not is_compatible(EngineType.Fuel, EnergyType.Electric)

    def test_engine_given_by_name(self):
        assert get_compatible_energy_types("Hydrogen") == [EnergyType.Hydrogen]
        assert is_compatible("Hybrid", EnergyType.LPG)

    def test_unknown_engine(self):
        assert get_compatible_energy_types("Steam") == []
        assert not is_compatible("Steam", EnergyType.Gasoline)

    def test_several_incompatible_types_are_combined(self):
        result = validate_engine_compatibility(EngineType.Electric, [EnergyType.Gasoline, EnergyType.Diesel])
        assert result.is_failure
        assert isinstance(result.error, ValidationError)
        assert len(result.error.errors) == 2

    def test_single_incompatible_type(self):
        result = validate_engine_compatibility(EngineType.Hydrogen, [EnergyType.Gasoline])
        assert result.error.code == VehicleEnergyTypeErrors.IncompatibleWithEngine(
            EnergyType.Gasoline, EngineType.Hydrogen
        ).code

    def test_assignment_duplicate_is_conflict(self):
        result = validate_energy_type_assignment(
            VEHICLE_ID, EngineType.Fuel, EnergyType.Gasoline, [EnergyType.Gasoline]
        )
        assert result.error.type == ErrorType.CONFLICT


class TestResult:

    def test_success_value(self):
        assert Result.success(5).value == 5

    def test_failure_value_raises(self):
        result = Result.failure(Error.not_found("X.NotFound", "missing"))
        with pytest.raises(ValueError):
            result.value

    def test_combine_all_successful(self):
        assert Result.combine(Result.success(1), Result.success(2)).value == 1

    def test_combine_single_failure_kept(self):
        error = Error.conflict("X.Conflict", "taken")
        assert Result.combine(Result.success(), Result.failure(error)).error is error

    def test_validation_error_serialises_children(self):
        errors = [Error.validation("A", "a"), Error.validation("B", "b")]
        data = Result.combine(*(Result.failure(e) for e in errors)).error.to_dict()
        assert data["code"] == "Validation.General"
        assert [e["code"] for e in data["errors"]] == ["A", "B"]
