"""Vehicle and energy entry endpoints."""
from datetime import date, timedelta

import pytest


def error_type(res) -> str:
    return res.json()["error"]["type"]


class TestVehicles:

    def test_create_and_get(self, client, auth_headers, make_vehicle):
        vehicle = make_vehicle(auth_headers, vin="wvwzzz1jzxw000001")
        assert vehicle["allowed_energy_types"] == ["Gasoline"]
        assert vehicle["vin"] == "WVWZZZ1JZXW000001"

        res = client.get(f"/api/v1/vehicles/{vehicle['id']}", headers=auth_headers)
        assert res.status_code == 200
        assert res.json()["brand"] == "Toyota"

    def test_incompatible_energy_type(self, client, auth_headers):
        res = client.post(
            "/api/v1/vehicles",
            json={"brand": "Tesla", "model": "Model 3", "engine_type": "Electric", "energy_types": ["Diesel"]},
            headers=auth_headers,
        )
        assert res.status_code == 400
        assert error_type(res) == "VehicleEnergyType.IncompatibleWithEngine"

    @pytest.mark.parametrize(
        "override",
        [{"brand": "   "}, {"manufactured_year": 1800}, {"vin": "TOO-SHORT"}],
    )
    def test_invalid_payload(self, client, auth_headers, override):
        payload = {"brand": "Fiat", "model": "Panda", "engine_type": "Fuel", **override}
        res = client.post("/api/v1/vehicles", json=payload, headers=auth_headers)
        assert res.status_code == 400
        assert error_type(res) == "validation_error"
        assert res.json()["error"]["details"][0]["loc"][0] == "body"

    def test_list_mine_is_paged_and_searchable(self, client, auth_headers, make_user, make_vehicle):
        for model in ("Corolla", "Yaris", "Camry"):
            make_vehicle(auth_headers, model=model)
        make_vehicle(make_user("someone@example.com"), model="Corolla Cross")

        page = client.get("/api/v1/vehicles/my", params={"pageSize": 2}, headers=auth_headers).json()
        assert page["total_count"] == 3
        assert len(page["items"]) == 2
        assert page["has_next_page"]

        found = client.get("/api/v1/vehicles/my", params={"searchTerm": "cor"}, headers=auth_headers).json()
        assert [v["model"] for v in found["items"]] == ["Corolla"]

    @pytest.mark.parametrize("term", ["_", "%", "Cor_lla"])
    def test_search_treats_wildcards_literally(self, client, auth_headers, make_vehicle, term):
        make_vehicle(auth_headers, model="Corolla")
        make_vehicle(auth_headers, model="Yaris")
        found = client.get("/api/v1/vehicles/my", params={"searchTerm": term}, headers=auth_headers).json()
        assert found["items"] == []

    def test_search_matches_literal_underscore(self, client, auth_headers, make_vehicle):
        make_vehicle(auth_headers, model="Model_S")
        make_vehicle(auth_headers, model="ModelXS")
        found = client.get("/api/v1/vehicles/my", params={"searchTerm": "l_s"}, headers=auth_headers).json()
        assert [v["model"] for v in found["items"]] == ["Model_S"]

    def test_other_users_vehicle_is_unauthorized(self, client, auth_headers, make_user, make_vehicle):
        vehicle = make_vehicle(make_user("owner@example.com"))
        res = client.get(f"/api/v1/vehicles/{vehicle['id']}", headers=auth_headers)
        assert res.status_code == 401
        assert error_type(res) == "Vehicles.Unauthorized"

    def test_missing_vehicle(self, client, auth_headers):
        res = client.get("/api/v1/vehicles/00000000-0000-0000-0000-000000000000", headers=auth_headers)
        assert res.status_code == 404
        assert error_type(res) == "Vehicles.NotFound"

    def test_supported_energy_types(self, client):
        res = client.get("/api/v1/vehicles/energy-types/supported", params={"engineType": "PlugInHybrid"})
        assert res.status_code == 200
        assert "Electric" in res.json()["energy_types"]
        assert "Hydrogen" not in res.json()["energy_types"]

    def test_update_replaces_energy_types(self, client, auth_headers, make_vehicle):
        vehicle = make_vehicle(auth_headers)
        res = client.put(
            f"/api/v1/vehicles/{vehicle['id']}",
            json={"brand": "Toyota", "model": "Corolla", "engine_type": "Fuel", "energy_types": ["Diesel", "LPG"]},
            headers=auth_headers,
        )
        assert res.status_code == 200
        assert sorted(res.json()["allowed_energy_types"]) == ["Diesel", "LPG"]
        assert res.json()["engine_type"] == "Fuel"

    def test_update_cannot_drop_type_in_use(self, client, auth_headers, make_vehicle):
        vehicle = make_vehicle(auth_headers)
        client.post(
            f"/api/v1/vehicles/{vehicle['id']}/energy-entries",
            json={"date": "2024-01-01", "mileage": 1000, "type": "Gasoline", "energy_unit": "Liter", "volume": 40},
            headers=auth_headers,
        )
        res = client.put(
            f"/api/v1/vehicles/{vehicle['id']}",
            json={"brand": "Toyota", "model": "Corolla", "engine_type": "Hybrid", "energy_types": ["LPG"]},
            headers=auth_headers,
        )
        assert res.status_code == 409
        assert error_type(res) == "Vehicles.CannotRemoveEnergyTypes"

    def test_delete(self, client, auth_headers, make_vehicle):
        vehicle = make_vehicle(auth_headers)
        assert client.delete(f"/api/v1/vehicles/{vehicle['id']}", headers=auth_headers).status_code == 204
        assert client.get(f"/api/v1/vehicles/{vehicle['id']}", headers=auth_headers).status_code == 404


class TestVehicleEnergyTypes:

    def test_add_and_remove(self, client, auth_headers, make_vehicle):
        vehicle = make_vehicle(auth_headers)
        url = f"/api/v1/vehicles/{vehicle['id']}/energy-types"

        res = client.post(url, json={"energy_type": "LPG"}, headers=auth_headers)
        assert res.status_code == 201
        assert res.json()["energy_type"] == "LPG"

        assert client.post(url, json={"energy_type": "LPG"}, headers=auth_headers).status_code == 409
        assert client.post(url, json={"energy_type": "Electric"}, headers=auth_headers).status_code == 400

        assert client.delete(f"{url}/LPG", headers=auth_headers).status_code == 204
        assert client.delete(f"{url}/LPG", headers=auth_headers).status_code == 404

    def test_remove_with_entries_refused(self, client, auth_headers, make_vehicle):
        vehicle = make_vehicle(auth_headers)
        client.post(
            f"/api/v1/vehicles/{vehicle['id']}/energy-entries",
            json={"date": "2024-01-01", "mileage": 1000, "type": "Gasoline", "energy_unit": "Liter", "volume": 40},
            headers=auth_headers,
        )
        res = client.delete(f"/api/v1/vehicles/{vehicle['id']}/energy-types/Gasoline", headers=auth_headers)
        assert res.status_code == 409
        assert error_type(res) == "VehicleEnergyType.DeleteFailedEntriesExists"


def fill_up(day, mileage, volume=40.0, energy_type="Gasoline", unit="Liter", **extra):
    return {"date": day, "mileage": mileage, "type": energy_type, "energy_unit": unit, "volume": volume, **extra}


class TestEnergyEntries:

    @pytest.fixture
    def vehicle(self, auth_headers, make_vehicle):
        return make_vehicle(auth_headers, engine_type="PlugInHybrid", energy_types=["Gasoline", "Electric"])

    def url(self, vehicle):
        return f"/api/v1/vehicles/{vehicle['id']}/energy-entries"

    def test_create_and_list_newest_first(self, client, auth_headers, vehicle):
        for day, mileage in (("2024-01-01", 1000), ("2024-03-01", 3000), ("2024-02-01", 2000)):
            res = client.post(self.url(vehicle), json=fill_up(day, mileage), headers=auth_headers)
            assert res.status_code == 201

        page = client.get(self.url(vehicle), headers=auth_headers).json()
        assert [e["mileage"] for e in page["items"]] == [3000, 2000, 1000]
        assert page["total_count"] == 3

    def test_energy_type_must_be_configured(self, client, auth_headers, vehicle):
        res = client.post(self.url(vehicle), json=fill_up("2024-01-01", 1000, energy_type="Diesel"), headers=auth_headers)
        assert res.status_code == 400
        assert error_type(res) == "EnergyEntries.IncompatibleEnergyType"

    def test_mileage_must_not_go_back_in_time(self, client, auth_headers, vehicle):
        client.post(self.url(vehicle), json=fill_up("2024-02-01", 2000), headers=auth_headers)
        res = client.post(self.url(vehicle), json=fill_up("2024-03-01", 1500), headers=auth_headers)
        assert res.status_code == 400
        assert error_type(res) == "EnergyEntries.IncorrectMileage"

    def test_non_positive_values_rejected(self, client, auth_headers, vehicle):
        res = client.post(self.url(vehicle), json=fill_up("2024-01-01", 1000, volume=0), headers=auth_headers)
        assert res.status_code == 400

    def test_future_date_rejected(self, client, auth_headers, vehicle):
        later = (date.today() + timedelta(days=2)).isoformat()
        res = client.post(self.url(vehicle), json=fill_up(later, 1000), headers=auth_headers)
        assert res.status_code == 400
        assert error_type(res) == "validation_error"
        assert res.json()["error"]["details"][0]["loc"] == ["body", "date"]

        entry = client.post(self.url(vehicle), json=fill_up("2024-01-01", 1000), headers=auth_headers).json()
        res = client.put(f"{self.url(vehicle)}/{entry['id']}", json=fill_up(later, 1000), headers=auth_headers)
        assert res.status_code == 400

    def test_page_size_over_limit(self, client, auth_headers, vehicle):
        res = client.get("/api/v1/energy-entries/my", params={"pageSize": 101}, headers=auth_headers)
        assert res.status_code == 400
        assert error_type(res) == "validation_error"

    def test_update_and_delete(self, client, auth_headers, vehicle):
        entry = client.post(self.url(vehicle), json=fill_up("2024-01-01", 1000), headers=auth_headers).json()
        res = client.put(
            f"{self.url(vehicle)}/{entry['id']}",
            json=fill_up("2024-01-02", 1100, volume=42, cost=84),
            headers=auth_headers,
        )
        assert res.status_code == 200
        assert res.json()["cost"] == 84

        assert client.delete(f"{self.url(vehicle)}/{entry['id']}", headers=auth_headers).status_code == 204
        assert client.delete(f"{self.url(vehicle)}/{entry['id']}", headers=auth_headers).status_code == 404

    def test_filter_by_type(self, client, auth_headers, vehicle):
        client.post(self.url(vehicle), json=fill_up("2024-01-01", 1000), headers=auth_headers)
        client.post(
            self.url(vehicle),
            json=fill_up("2024-01-05", 1200, volume=30, energy_type="Electric", unit="kWh"),
            headers=auth_headers,
        )
        page = client.get(self.url(vehicle), params={"energyTypes": ["Electric"]}, headers=auth_headers).json()
        assert [e["type"] for e in page["items"]] == ["Electric"]

    def test_stats(self, client, auth_headers, vehicle):
        client.post(self.url(vehicle), json=fill_up("2024-01-01", 1000, 50, price_per_unit=5), headers=auth_headers)
        client.post(self.url(vehicle), json=fill_up("2024-01-10", 1500, 60, cost=420), headers=auth_headers)

        stats = client.get(f"{self.url(vehicle)}/stats", headers=auth_headers).json()
        assert stats["total_entries"] == 2
        assert stats["total_cost"] == pytest.approx(420)
        liters = stats["stats_by_unit"][0]
        assert liters["unit"] == "Liter"
        assert liters["average_consumption"] == pytest.approx(12)
        assert liters["average_cost_per_100km"] == pytest.approx(0.6)

    def test_list_my_entries_across_vehicles(self, client, auth_headers, make_vehicle, vehicle):
        other = make_vehicle(auth_headers, model="Yaris")
        client.post(self.url(vehicle), json=fill_up("2024-01-01", 1000), headers=auth_headers)
        client.post(self.url(other), json=fill_up("2024-02-01", 500), headers=auth_headers)

        page = client.get("/api/v1/energy-entries/my", headers=auth_headers).json()
        assert page["total_count"] == 2
        assert page["items"][0]["vehicle_id"] == other["id"]

    def test_strangers_cannot_log_entries(self, client, make_user, vehicle):
        stranger = make_user("stranger@example.com")
        res = client.post(self.url(vehicle), json=fill_up("2024-01-01", 1000), headers=stranger)
        assert res.status_code == 401
        assert error_type(res) == "EnergyEntries.Unauthorized"
