from datetime import date, datetime
from types import SimpleNamespace
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest

from waktu_dashboard.core.db import dispose_db, init_db
from waktu_dashboard.plugins.prayer.prayer_set import PrayerSet

KL = ZoneInfo("Asia/Kuala_Lumpur")
PRAYER_DAY = date(2024, 7, 8)

# WLY01, 8 July 2024
WALL_CLOCK = {
    "fajr": (5, 45),
    "syuruk": (7, 8),
    "dhuhr": (13, 18),
    "asr": (16, 42),
    "maghrib": (19, 25),
    "isha": (20, 40),
}


def kl_timestamp(hour: int, minute: int, second: int = 0, day: date = PRAYER_DAY) -> int:
    return int(datetime(day.year, day.month, day.day, hour, minute, second, tzinfo=KL).timestamp())


@pytest.fixture
def at():
    """at(hh, mm[, ss[, day]]) -> epoch seconds in Kuala Lumpur"""
    return kl_timestamp


@pytest.fixture
def prayer_set():
    return PrayerSet(
        zone="WLY01",
        day=PRAYER_DAY.day,
        hijri="1446-01-01",
        **{key: kl_timestamp(*hm) for key, hm in WALL_CLOCK.items()},
    )


@pytest.fixture
def db(tmp_path):
    init_db(db_url=f"sqlite:///{tmp_path / 'test.db'}")
    yield
    dispose_db()


@pytest.fixture
def fake_app(tmp_path):
    """Just enough of DashboardApp for the HTTP API."""
    components = {}
    component_configs = {
        "Prayer Times": {"enable": True, "zone": "WLY01"},
        "Zones": {"enable": True},
        "Qibla": {"enable": True},
    }
    config = SimpleNamespace(
        data={
            "timezone": "Asia/Kuala_Lumpur",
            "cache": {"directory": str(tmp_path / "cache")},
            "components": component_configs,
        },
        get_component_config=lambda name: component_configs.get(name),
    )
    task_manager = MagicMock()
    task_manager.get_active_timers.return_value = []
    return SimpleNamespace(
        config=config,
        plugin_manager=SimpleNamespace(components={name: object for name in component_configs}),
        task_manager=task_manager,
        components=components,
        get_component=lambda name: components.get(name),
    )
