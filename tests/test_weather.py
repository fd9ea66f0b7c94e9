from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from waktu_dashboard.plugins.weather.service import get_forecast_record, get_saved_forecast, save_forecast
from waktu_dashboard.plugins.weather.task import resolve_location
from waktu_dashboard.plugins.weather.weather_backend import (
    MetMalaysiaBackend,
    WeatherApiError,
    get_current_forecast,
    map_zone_to_weather_location,
    select_forecast_for,
)

FORECASTS = [
    {
        "location": {"location_id": "Ds058", "location_name": "Gombak"},
        "date": "2024-07-09",
        "morning_forecast": "Tiada hujan",
        "afternoon_forecast": "Ribut petir",
        "night_forecast": "Berangin",
        "min_temp": 24,
        "max_temp": 33,
    },
    {
        "location": {"location_id": "Ds058", "location_name": "Gombak"},
        "date": "2024-07-08",
        "morning_forecast": "Berjerebu",
        "afternoon_forecast": "Hujan",
        "night_forecast": "Tiada hujan",
        "min_temp": 25,
        "max_temp": 34,
    },
]


def test_zone_mapping():
    assert map_zone_to_weather_location("SGR01") == "Gombak"
    assert map_zone_to_weather_location("sgr03") == "Klang"
    assert map_zone_to_weather_location("SBH07") == "Kuala Lumpur"
    assert map_zone_to_weather_location(None) == "Kuala Lumpur"


def test_resolve_location():
    assert resolve_location({"location": "Sepang"}, {}) == "Sepang"
    config_data = {"components": {"Prayer Times": {"zone": "JHR01"}}}
    assert resolve_location({}, config_data) == "Johor Bahru"
    assert resolve_location({}, None) == "Kuala Lumpur"


@pytest.mark.parametrize("hour, expected", [
    (0, "Berjerebu"), (11, "Berjerebu"), (12, "Hujan"), (17, "Hujan"), (18, "Tiada hujan"), (23, "Tiada hujan"),
])
def test_forecast_by_time_of_day(hour, expected):
    assert get_current_forecast(FORECASTS[1], hour) == expected


def test_select_forecast_for():
    assert select_forecast_for(FORECASTS, date(2024, 7, 9))["date"] == "2024-07-09"
    assert select_forecast_for(FORECASTS, date(2024, 7, 1))["date"] == "2024-07-08"
    assert select_forecast_for([], date(2024, 7, 1)) is None


@patch("waktu_dashboard.plugins.weather.weather_backend.requests.get")
def test_fetch_filters_by_location(mock_get, tmp_path):
    mock_get.return_value = MagicMock(ok=True, **{"json.return_value": FORECASTS})
    backend = MetMalaysiaBackend({"cache_dir": str(tmp_path)})

    data = backend.get_weather("Gombak")

    assert data["location"] == "Gombak"
    assert len(data["forecasts"]) == 2
    assert mock_get.call_args[1]["params"] == {"contains": "Gombak@location__location_name"}

    backend.get_weather("Gombak")
    assert mock_get.call_count == 1


@patch("waktu_dashboard.plugins.weather.weather_backend.requests.get")
def test_non_list_response_raises(mock_get, tmp_path):
    mock_get.return_value = MagicMock(ok=True, **{"json.return_value": {"error": "rate limited"}})
    with pytest.raises(WeatherApiError):
        MetMalaysiaBackend({"cache_dir": str(tmp_path)}).get_weather("Gombak")


def test_saved_forecast_is_kept_per_location(db):
    save_forecast("Weather", {"location": "Gombak", "forecasts": [], "today": None})
    save_forecast("Weather", {"location": "Kuala Lumpur", "forecasts": [], "today": None})
    save_forecast("Weather", {"location": "Gombak", "forecasts": FORECASTS, "today": FORECASTS[1]})

    assert get_saved_forecast("Weather", "Gombak")["today"]["date"] == "2024-07-08"
    assert get_saved_forecast("Weather", "Kuala Lumpur")["forecasts"] == []
    assert get_saved_forecast("Weather", "Kota Setar") is None
    assert get_forecast_record("Weather").location == "Gombak"
