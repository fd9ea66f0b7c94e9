from datetime import datetime, timedelta
from queue import Queue
from unittest.mock import patch

from waktu_dashboard.core.models import get_all_task_schedules, utc_now
from waktu_dashboard.core.task import (
    TaskType,
    compute_next_run,
    get_next_run_from_db,
    interval_schedule,
)
from waktu_dashboard.plugins.prayer.prayer_base import PrayerApiError
from waktu_dashboard.plugins.prayer.prayer_set import PrayerDataError
from waktu_dashboard.plugins.prayer.service import get_latest_prayer_times_record
from waktu_dashboard.plugins.prayer.task import PrayerTimesTask
from waktu_dashboard.plugins.verse.quran_service import QuranApiError
from waktu_dashboard.plugins.verse.task import DailyVerseTask
from waktu_dashboard.plugins.weather.task import WeatherTask
from waktu_dashboard.plugins.weather.weather_backend import WeatherApiError
from waktu_dashboard.plugins.zones.task import ZoneCheckTask
from waktu_dashboard.plugins.zones.zone_service import Zone

PRAYER = "Prayer Times"


def published(queue):
    name, result = queue.get_nowait()
    assert queue.empty()
    return name, result


def test_compute_next_run():
    last = datetime(2024, 7, 8, 10, 0)
    assert compute_next_run(TaskType.INTERVAL_SECONDS, {"interval_seconds": 600}, last) == datetime(2024, 7, 8, 10, 10)
    assert compute_next_run(TaskType.DAILY, {"time": "00:05"}, last) == datetime(2024, 7, 9, 0, 5)
    assert compute_next_run(TaskType.DAILY, {"time": "12:00"}, last) == datetime(2024, 7, 8, 12, 0)


def test_interval_schedule_has_a_floor():
    assert interval_schedule({}, 3600) == (TaskType.INTERVAL_SECONDS, {"interval_seconds": 3600})
    assert interval_schedule({"update_interval": 5}, 3600) == (TaskType.INTERVAL_SECONDS, {"interval_seconds": 60})
    assert interval_schedule({"update_interval": "soon"}, 900)[1] == {"interval_seconds": 900}


def test_schedule_persists_after_run(db, prayer_set):
    task = PrayerTimesTask(PRAYER, {"zone": "WLY01"})
    task.ensure_scheduled()
    assert get_next_run_from_db(PRAYER) is None

    with patch("waktu_dashboard.plugins.prayer.task.WaktuSolatBackend") as backend:
        backend.return_value.get_prayer_times.return_value = prayer_set
        task.run({"zone": "WLY01"}, Queue())

    next_run = get_next_run_from_db(PRAYER)
    assert next_run - utc_now() > timedelta(hours=5, minutes=59)
    (row,) = get_all_task_schedules()
    assert row["component_name"] == PRAYER
    assert row["last_error"] is None


def test_prayer_task_saves_and_publishes(db, prayer_set):
    queue = Queue()
    with patch("waktu_dashboard.plugins.prayer.task.WaktuSolatBackend") as backend:
        backend.return_value.get_prayer_times.return_value = prayer_set
        PrayerTimesTask(PRAYER, {}).run({"zone": "wly01"}, queue, force_fetch=True)

    backend.return_value.get_prayer_times.assert_called_once()
    assert backend.return_value.get_prayer_times.call_args[0][0] == "WLY01"
    assert backend.return_value.get_prayer_times.call_args[1]["force_fetch"] is True
    name, result = published(queue)
    assert name == PRAYER
    assert result["prayer_set"] == prayer_set
    assert result["source"] == "api"
    assert get_latest_prayer_times_record(PRAYER).zone == "WLY01"


def test_prayer_task_falls_back_to_database(db, prayer_set):
    task = PrayerTimesTask(PRAYER, {})
    with patch("waktu_dashboard.plugins.prayer.task.WaktuSolatBackend") as backend:
        backend.return_value.get_prayer_times.return_value = prayer_set
        task.run({"zone": "WLY01"}, Queue())

        queue = Queue()
        backend.return_value.get_prayer_times.side_effect = PrayerApiError("offline")
        task.run({"zone": "WLY01"}, queue)

    _, result = published(queue)
    assert result["source"] == "database"
    assert result["prayer_set"] == prayer_set


def test_prayer_task_reports_unreachable_provider(db):
    queue = Queue()
    with patch("waktu_dashboard.plugins.prayer.task.WaktuSolatBackend") as backend:
        backend.return_value.get_prayer_times.side_effect = PrayerApiError("offline")
        PrayerTimesTask(PRAYER, {}).run({"zone": "SGR01"}, queue)

    _, result = published(queue)
    assert result == {"error": "Unable to load prayer times for zone SGR01", "zone": "SGR01"}


def test_prayer_task_reports_bad_zone(db):
    queue = Queue()
    with patch("waktu_dashboard.plugins.prayer.task.WaktuSolatBackend") as backend:
        backend.return_value.get_prayer_times.side_effect = PrayerDataError("no table")
        PrayerTimesTask(PRAYER, {}).run({"zone": "XXX99"}, queue)

    _, result = published(queue)
    assert result["zone"] == "XXX99"
    assert "check the zone code" in result["error"]


def test_weather_task_republishes_saved_forecast(db):
    data = {"location": "Gombak", "forecasts": [], "today": None}
    task = WeatherTask("Weather", {})
    config_data = {"components": {PRAYER: {"zone": "SGR01"}}}

    with patch("waktu_dashboard.plugins.weather.task.MetMalaysiaBackend") as backend:
        backend.return_value.get_weather.return_value = data
        task.run({}, Queue(), config_data=config_data)
        assert backend.return_value.get_weather.call_args[0][0] == "Gombak"

        queue = Queue()
        backend.return_value.get_weather.side_effect = WeatherApiError("offline")
        task.run({}, queue, config_data=config_data)

    assert published(queue) == ("Weather", data)


def test_weather_task_does_not_republish_other_location(db):
    task = WeatherTask("Weather", {})

    with patch("waktu_dashboard.plugins.weather.task.MetMalaysiaBackend") as backend:
        backend.return_value.get_weather.return_value = {"location": "Gombak", "forecasts": [], "today": None}
        task.run({}, Queue(), config_data={"components": {PRAYER: {"zone": "SGR01"}}})

        queue = Queue()
        backend.return_value.get_weather.side_effect = WeatherApiError("offline")
        task.run({}, queue, config_data={"components": {PRAYER: {"zone": "KDH01"}}})

    assert published(queue) == ("Weather", None)


def test_verse_task_uses_static_verse_when_offline(db):
    queue = Queue()
    with patch("waktu_dashboard.plugins.verse.task.QuranService") as service:
        service.return_value.get_daily_verse.side_effect = QuranApiError("offline")
        DailyVerseTask("Daily Verse", {}).run({}, queue)

    _, result = published(queue)
    assert result["fallback"] is True
    assert result["verse"]["surahNo"] == 13


def test_zone_task_publishes_working_zones(db):
    zones = [Zone("WLY01", "Kuala Lumpur", "Wilayah Persekutuan")]
    queue = Queue()
    with patch("waktu_dashboard.plugins.zones.task.ZoneChecker") as checker:
        checker.return_value.get_working_zones.return_value = zones
        checker.return_value.zones = zones * 3
        ZoneCheckTask("Zones", {}).run({}, queue, force_fetch=True)

    checker.return_value.get_working_zones.assert_called_once_with(force=True)
    assert published(queue) == ("Zones", {"zones": zones, "total": 3})
