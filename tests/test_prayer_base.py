from datetime import date
from unittest.mock import MagicMock, patch

import pytest
import requests

from waktu_dashboard.plugins.prayer.prayer_base import PrayerApiError, WaktuSolatBackend, format_timestamp
from waktu_dashboard.plugins.prayer.prayer_set import PrayerDataError


def make_response(prayer_set, ok=True, status_code=200):
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    response.reason = "OK" if ok else "Not Found"
    entry = {k: v for k, v in prayer_set.as_dict().items() if k != "zone"}
    response.json.return_value = {"zone": "WLY01", "prayers": [dict(entry, day=7), entry]}
    return response


@pytest.fixture
def backend(tmp_path):
    return WaktuSolatBackend({"cache_dir": str(tmp_path)})


@patch("waktu_dashboard.plugins.prayer.prayer_base.requests.get")
def test_returns_todays_prayer_set(mock_get, backend, prayer_set):
    mock_get.return_value = make_response(prayer_set)

    result = backend.get_prayer_times("WLY01", date(2024, 7, 8))

    assert result == prayer_set
    mock_get.assert_called_once()
    assert mock_get.call_args[0][0] == "https://api.waktusolat.app/v2/solat/WLY01"


@patch("waktu_dashboard.plugins.prayer.prayer_base.requests.get")
def test_month_table_is_cached(mock_get, backend, prayer_set):
    mock_get.return_value = make_response(prayer_set)

    backend.get_prayer_times("WLY01", date(2024, 7, 8))
    backend.get_prayer_times("WLY01", date(2024, 7, 8))
    assert mock_get.call_count == 1

    backend.get_prayer_times("WLY01", date(2024, 7, 8), force_fetch=True)
    assert mock_get.call_count == 2


@patch("waktu_dashboard.plugins.prayer.prayer_base.requests.get")
def test_error_status_raises_api_error(mock_get, backend, prayer_set):
    mock_get.return_value = make_response(prayer_set, ok=False, status_code=404)
    with pytest.raises(PrayerApiError):
        backend.get_prayer_times("XXX99", date(2024, 7, 8))


@patch("waktu_dashboard.plugins.prayer.prayer_base.requests.get")
def test_network_error_raises_api_error(mock_get, backend):
    mock_get.side_effect = requests.exceptions.ConnectionError("offline")
    with pytest.raises(PrayerApiError):
        backend.get_prayer_times("WLY01", date(2024, 7, 8))


@patch("waktu_dashboard.plugins.prayer.prayer_base.requests.get")
def test_missing_day_raises_data_error(mock_get, backend, prayer_set):
    mock_get.return_value = make_response(prayer_set)
    with pytest.raises(PrayerDataError):
        backend.get_prayer_times("WLY01", date(2024, 7, 20))


@patch("waktu_dashboard.plugins.prayer.prayer_base.requests.get")
def test_bad_payload_raises_data_error(mock_get, backend):
    response = MagicMock(ok=True)
    response.json.return_value = {"status": "maintenance"}
    mock_get.return_value = response
    with pytest.raises(PrayerDataError):
        backend.get_prayer_times("WLY01", date(2024, 7, 8))


def test_format_timestamp_uses_zone_wall_clock(prayer_set):
    assert format_timestamp(prayer_set.fajr) == "5:45 AM"
    assert format_timestamp(prayer_set.dhuhr) == "1:18 PM"
    assert format_timestamp(prayer_set.isha) == "8:40 PM"
