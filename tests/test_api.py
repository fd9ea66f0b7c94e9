from datetime import date
from unittest.mock import MagicMock, patch

import pytest
import requests
from fastapi.testclient import TestClient

from waktu_dashboard.api import create_app
from waktu_dashboard.core.task import TaskType, upsert_task_schedule
from waktu_dashboard.plugins.prayer.resolver import NextPrayer
from waktu_dashboard.plugins.prayer.service import save_prayer_times
from waktu_dashboard.plugins.weather.service import save_forecast

IDLE_STATUS = {
    "state": "idle",
    "zone": "WLY01",
    "triggered_key": None,
    "active_key": None,
    "next_prayer": {"name": "Asr", "key": "asr", "timestamp": 1720428120},
    "enabled": True,
}


@pytest.fixture
def client(db, fake_app):
    return TestClient(create_app(fake_app))


@pytest.fixture
def prayer_component(fake_app):
    component = MagicMock()
    component.scheduler.status.return_value = IDLE_STATUS
    component.scheduler.next_prayer = None
    fake_app.components["Prayer Times"] = component
    return component


def test_list_components(client):
    response = client.get("/api/components")
    assert response.status_code == 200
    names = [c["name"] for c in response.json()]
    assert names == ["Prayer Times", "Zones", "Qibla"]


def test_list_tasks(client):
    upsert_task_schedule("Weather", TaskType.INTERVAL_SECONDS, {"interval_seconds": 3600})
    body = client.get("/api/tasks").json()
    assert body["active_timers"] == []
    assert body["db_schedules"][0]["component_name"] == "Weather"


def test_prayer_data(client, prayer_set):
    assert client.get("/api/components/prayer/data").status_code == 404

    save_prayer_times("Prayer Times", date(2024, 7, 8), prayer_set)
    body = client.get("/api/components/prayer/data").json()
    assert body["zone"] == "WLY01"
    assert body["prayer_date"] == "2024-07-08"
    assert body["data"]["fajr"] == prayer_set.fajr


def test_next_prayer_from_stored_table(client, prayer_set):
    assert client.get("/api/components/prayer/next").status_code == 404

    save_prayer_times("Prayer Times", date(2024, 7, 8), prayer_set)
    body = client.get("/api/components/prayer/next").json()
    # The stored day is long past, so it resolves to the following Fajr
    assert body["key"] == "fajr"
    assert body["remaining_seconds"] == 0


def test_next_prayer_from_running_scheduler(client, prayer_component):
    prayer_component.scheduler.next_prayer = NextPrayer("Asr", "asr", 4102444800)
    body = client.get("/api/components/prayer/next").json()
    assert body["key"] == "asr"
    assert body["remaining_seconds"] > 0


def test_azan_controls_need_the_widget(client):
    assert client.get("/api/components/prayer/status").status_code == 404
    assert client.post("/api/components/prayer/stop").status_code == 404


def test_test_azan(client, prayer_component):
    response = client.post("/api/components/prayer/test-azan/maghrib")
    assert response.status_code == 200
    assert response.json()["state"] == "idle"
    prayer_component.test_azan.assert_called_once_with("maghrib")

    assert client.post("/api/components/prayer/test-azan/tahajjud").status_code == 404


def test_stop_azan(client, prayer_component):
    assert client.post("/api/components/prayer/stop").status_code == 200
    prayer_component.stop_azan.assert_called_once_with()


def test_zone_list(client):
    body = client.get("/api/components/zones/data").json()
    assert body["total"] == 87
    assert len(body["zones"]) == 87


def test_zone_refresh(client, fake_app):
    assert client.post("/api/components/zones/refresh").json() == {"status": "scheduled"}
    fake_app.task_manager.run_task_now.assert_called_once_with("Zones", force_fetch=True)


@patch("waktu_dashboard.plugins.zones.zone_service.requests.get")
def test_zone_locate(mock_get, client):
    mock_get.return_value = MagicMock(ok=True, **{"json.return_value": {"zone": "SGR01"}})
    body = client.get("/api/components/zones/locate", params={"lat": 3.2, "lon": 101.6}).json()
    assert body["zone"] == "SGR01"
    assert body["state"] == "Selangor"

    mock_get.side_effect = requests.exceptions.ConnectionError("offline")
    assert client.get("/api/components/zones/locate", params={"lat": 3.2, "lon": 101.6}).status_code == 502


def test_qibla(client, fake_app):
    body = client.get("/api/components/qibla/data", params={"lat": 3.139, "lon": 101.6869}).json()
    assert body["bearing_text"] in ("292°", "293°")
    assert body["distance_text"] == "7k km"

    assert client.get("/api/components/qibla/data").status_code == 400
    fake_app.config.data["components"]["Qibla"].update(lat=21.4225, lon=39.8262)
    assert client.get("/api/components/qibla/data").json()["distance_text"] == "0 km"


def test_hijri(client):
    body = client.get("/api/components/hijri/data", params={"day": "2024-07-08"}).json()
    assert body["month_name"] == "Muharram"
    assert body["today"]["year"] == 1446


def test_hadith_without_widget(client):
    body = client.get("/api/components/hadith/data").json()
    assert body["total"] == 24
    assert body["hadith"]["malay"]


def test_verse_without_widget(client):
    body = client.get("/api/components/verse/data").json()
    assert body["fallback"] is True
    assert body["reference"] == "Ar-Ra'd 13:28"


def test_clock(client):
    body = client.get("/api/components/clock/data").json()
    assert body["timezone"] == "Asia/Kuala_Lumpur"
    assert body["greeting"]


def test_weather_serves_forecast_for_zone_location(client):
    assert client.get("/api/components/weather/data").status_code == 404

    today = {"date": "2024-07-08", "morning_forecast": "Tiada hujan", "afternoon_forecast": "Ribut petir",
             "night_forecast": "Berawan", "min_temp": 25, "max_temp": 33}
    save_forecast("Weather", {"location": "Gombak", "forecasts": [today], "today": today})
    # WLY01 maps to Kuala Lumpur, which has nothing saved
    assert client.get("/api/components/weather/data").status_code == 404

    body = client.get("/api/components/weather/data", params={"location": "Gombak"}).json()
    assert body["location"] == "Gombak"
    assert body["today"]["max_temp"] == 33
    assert body["current"] in ("Tiada hujan", "Ribut petir", "Berawan")
    assert len(body["forecasts"]) == 1
