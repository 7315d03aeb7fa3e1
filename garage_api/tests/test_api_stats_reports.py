"""Vehicle statistics, dashboard cards, report exports and the health check."""
import io
from datetime import date, timedelta

import pandas as pd
import pytest


def days_ago(n: int) -> str:
    return (date.today() - timedelta(days=n)).isoformat()


@pytest.fixture
def logged_vehicle(client, auth_headers, make_vehicle):
    """A vehicle with two fill-ups and one service visit."""
    vehicle = make_vehicle(auth_headers)
    entries_url = f"/api/v1/vehicles/{vehicle['id']}/energy-entries"
    for day, mileage, volume, cost in ((days_ago(10), 1000, 40, 200), (days_ago(2), 1300, 24, 120)):
        res = client.post(
            entries_url,
            json={
                "date": day, "mileage": mileage, "type": "Gasoline",
                "energy_unit": "Liter", "volume": volume, "cost": cost,
            },
            headers=auth_headers,
        )
        assert res.status_code == 201

    general = next(
        t["id"] for t in client.get("/api/v1/service-types", headers=auth_headers).json() if t["name"] == "General"
    )
    res = client.post(
        f"/api/v1/vehicles/{vehicle['id']}/service-records",
        json={
            "title": "Inspection", "service_date": f"{days_ago(5)}T08:00:00Z",
            "type_id": general, "mileage": 1100, "manual_cost": 80,
        },
        headers=auth_headers,
    )
    assert res.status_code == 201
    return vehicle


class TestVehicleStats:

    def test_empty_vehicle(self, client, auth_headers, make_vehicle):
        vehicle = make_vehicle(auth_headers)
        stats = client.get(f"/api/v1/vehicles/{vehicle['id']}/stats", headers=auth_headers).json()
        assert stats["total_cost"] == 0
        assert stats["total_fuel_entries"] == 0
        assert stats["efficiency_stats"] == []

    def test_aggregates(self, client, auth_headers, logged_vehicle):
        res = client.get(f"/api/v1/vehicles/{logged_vehicle['id']}/stats", headers=auth_headers)
        assert res.status_code == 200
        stats = res.json()
        assert stats["total_fuel_cost"] == pytest.approx(320)
        assert stats["total_services_cost"] == pytest.approx(80)
        assert stats["total_cost"] == pytest.approx(400)
        assert stats["last_mileage"] == 1300
        assert stats["distance_traveled"] == 300
        assert stats["total_fuel_entries"] == 2
        assert stats["total_service_records"] == 1
        assert stats["last_fuel_entry_date"] == days_ago(2)

        gasoline = stats["efficiency_stats"][0]
        assert gasoline["energy_type"] == "Gasoline"
        assert gasoline["entries_count"] == 2

        kinds = {a["type"] for a in stats["vehicle_activities"]}
        assert {"VehicleAdded", "ServiceAdded", "Refuel"} <= kinds

    def test_other_users_vehicle(self, client, make_user, logged_vehicle):
        res = client.get(f"/api/v1/vehicles/{logged_vehicle['id']}/stats", headers=make_user("nosy@example.com"))
        assert res.status_code == 401


class TestDashboard:

    def test_empty_account(self, client, auth_headers):
        stats = client.get("/api/v1/dashboard/stats", headers=auth_headers).json()
        assert stats["fuel_expenses"]["value"] == "0.00"
        assert stats["fuel_expenses"]["context_trend"] == "None"
        assert stats["distance_driven"]["value"] == "0 km"
        assert stats["recent_activity"] == []

    def test_cards_and_timeline(self, client, auth_headers, logged_vehicle):
        stats = client.get("/api/v1/dashboard/stats", headers=auth_headers).json()
        assert stats["distance_driven"]["value"] == "300 km"
        assert stats["distance_driven"]["context_trend_mode"] == "Good"

        timeline = stats["recent_activity"]
        assert {a["vehicle"] for a in timeline} == {"Toyota Corolla"}
        service = next(a for a in timeline if a["type"] == "ServiceAdded")
        assert {"label": "Cost", "value": "80.00"} in service["details"]


class TestReports:

    def url(self, vehicle, kind):
        return f"/api/v1/reports/vehicles/{vehicle['id']}/{kind}"

    def test_energy_entries_csv(self, client, auth_headers, logged_vehicle):
        res = client.get(self.url(logged_vehicle, "energy-entries"), headers=auth_headers)
        assert res.status_code == 200
        assert res.headers["content-type"].startswith("text/csv")
        assert "energy_entries.csv" in res.headers["content-disposition"]

        df = pd.read_csv(io.StringIO(res.text))
        assert list(df.columns) == ["date", "mileage", "type", "energy_unit", "volume", "price_per_unit", "cost"]
        assert list(df["mileage"]) == [1000, 1300]

    def test_service_records_xlsx(self, client, auth_headers, logged_vehicle):
        res = client.get(
            self.url(logged_vehicle, "service-records"), params={"format": "xlsx"}, headers=auth_headers
        )
        assert res.status_code == 200
        assert res.headers["content-type"].startswith("application/vnd.openxmlformats")

        df = pd.read_excel(io.BytesIO(res.content), engine="openpyxl")
        assert df.loc[0, "title"] == "Inspection"
        assert df.loc[0, "total_cost"] == pytest.approx(80)

    @pytest.mark.parametrize("kind", ["energy-entries", "service-records"])
    def test_pdf(self, client, auth_headers, logged_vehicle, kind):
        res = client.get(self.url(logged_vehicle, kind), params={"format": "pdf"}, headers=auth_headers)
        assert res.status_code == 200
        assert res.headers["content-type"] == "application/pdf"
        assert res.content.startswith(b"%PDF")

    def test_unknown_format(self, client, auth_headers, logged_vehicle):
        res = client.get(self.url(logged_vehicle, "energy-entries"), params={"format": "docx"}, headers=auth_headers)
        assert res.status_code == 400

    def test_report_needs_ownership(self, client, make_user, logged_vehicle):
        res = client.get(self.url(logged_vehicle, "service-records"), headers=make_user("nosy@example.com"))
        assert res.status_code == 401


class TestHealth:

    def test_health(self, client):
        res = client.get("/api/v1/health")
        assert res.status_code == 200
        assert res.json()["message"] == "Healthy"
        assert res.headers["X-Correlation-ID"]
