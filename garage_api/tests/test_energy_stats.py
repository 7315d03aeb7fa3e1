"""Tests for the pure energy statistics functions."""
import uuid
from datetime import date

import pytest

from src.db.models.energy import EnergyEntry
from src.db.models.enums import EnergyType, EnergyUnit
from src.services.energy_stats import (
    calculate_average_consumption,
    calculate_average_price_per_unit,
    calculate_energy_stats,
    calculate_statistics_for_unit,
    calculate_total_cost,
    calculate_total_volume,
)


def entry(mileage, volume, cost=None, price=None, energy_type=EnergyType.Gasoline, unit=EnergyUnit.Liter):
    return EnergyEntry(
        date=date(2024, 1, 1),
        mileage=mileage,
        volume=volume,
        cost=cost,
        price_per_unit=price,
        type=energy_type,
        energy_unit=unit,
    )


class TestAverageConsumption:

    def test_single_pair(self):
        """60 units over 500 km is 12 per 100 km."""
        assert calculate_average_consumption([entry(1000, 50), entry(1500, 60)]) == pytest.approx(12)

    def test_mean_of_pairs(self):
        """Pairs give 6 and 7; the result is their mean."""
        entries = [entry(1000, 40), entry(1500, 30), entry(2000, 35)]
        assert calculate_average_consumption(entries) == pytest.approx(6.5)

    def test_unordered_input_is_sorted_by_mileage(self):
        entries = [entry(2000, 30), entry(1000, 40)]
        assert calculate_average_consumption(entries) == pytest.approx(3)

    def test_zero_distance_pairs_skipped(self):
        entries = [entry(1000, 40), entry(1000, 20), entry(1500, 30)]
        assert calculate_average_consumption(entries) == pytest.approx(6)

    def test_fewer_than_two_entries(self):
        assert calculate_average_consumption([]) == 0
        assert calculate_average_consumption([entry(1000, 40)]) == 0

    def test_no_valid_pair(self):
        assert calculate_average_consumption([entry(1000, 40), entry(1000, 30)]) == 0


class TestTotals:

    def test_total_volume(self):
        assert calculate_total_volume([entry(1, 10.5), entry(2, 4.5)]) == pytest.approx(15)

    def test_total_cost_ignores_missing(self):
        entries = [entry(1, 1, cost=100), entry(2, 1), entry(3, 1, cost=200)]
        assert calculate_total_cost(entries) == pytest.approx(300)

    def test_average_price_ignores_missing(self):
        entries = [entry(1, 1, price=5), entry(2, 1), entry(3, 1, price=7)]
        assert calculate_average_price_per_unit(entries) == pytest.approx(6)

    def test_average_price_without_prices(self):
        assert calculate_average_price_per_unit([entry(1, 1)]) == 0


class TestStatisticsForUnit:

    def test_cost_per_100km(self):
        entries = [entry(1000, 50, price=5), entry(1500, 60, price=7)]
        stats = calculate_statistics_for_unit(EnergyUnit.Liter, entries)
        assert stats.average_consumption == pytest.approx(12)
        assert stats.average_price_per_unit == pytest.approx(6)
        assert stats.average_cost_per_100km == pytest.approx(0.72)
        assert stats.entries_count == 2
        assert stats.energy_types == [EnergyType.Gasoline]

    def test_none_entries_raise(self):
        with pytest.raises(ValueError):
            calculate_statistics_for_unit(EnergyUnit.Liter, None)


class TestEnergyStats:

    def test_groups_by_unit(self):
        vehicle_id = uuid.uuid4()
        entries = [
            entry(1000, 40, cost=80),
            entry(1500, 30, cost=60),
            entry(1200, 20, cost=10, energy_type=EnergyType.Electric, unit=EnergyUnit.kWh),
        ]
        stats = calculate_energy_stats(vehicle_id, entries)
        assert stats.vehicle_id == vehicle_id
        assert stats.total_entries == 3
        assert stats.total_volume == pytest.approx(90)
        assert stats.total_cost == pytest.approx(150)
        assert [s.unit for s in stats.stats_by_unit] == [EnergyUnit.Liter, EnergyUnit.kWh]

    def test_type_filter(self):
        entries = [
            entry(1000, 40),
            entry(1200, 20, energy_type=EnergyType.LPG),
        ]
        stats = calculate_energy_stats(uuid.uuid4(), entries, [EnergyType.LPG])
        assert stats.total_entries == 1
        assert stats.stats_by_unit[0].energy_types == [EnergyType.LPG]

    def test_empty(self):
        stats = calculate_energy_stats(uuid.uuid4(), [])
        assert stats.total_entries == 0
        assert stats.stats_by_unit == []
