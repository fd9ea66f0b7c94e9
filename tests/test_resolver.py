import pytest

from waktu_dashboard.plugins.prayer.prayer_set import PRAYER_KEYS, PrayerDataError, PrayerSet
from waktu_dashboard.plugins.prayer.resolver import (
    DAY_SECONDS,
    format_countdown,
    get_next_prayer,
    get_next_prayer_after,
    get_time_remaining,
)


def test_before_fajr_is_fajr(prayer_set, at):
    next_prayer = get_next_prayer(prayer_set, at(4, 0))
    assert next_prayer.key == "fajr"
    assert next_prayer.name == "Fajr"
    assert next_prayer.timestamp == prayer_set.fajr


def test_between_prayers(prayer_set, at):
    assert get_next_prayer(prayer_set, at(14, 0)).key == "asr"


def test_prayer_at_now_counts_as_passed(prayer_set):
    assert get_next_prayer(prayer_set, prayer_set.dhuhr).key == "asr"


def test_after_isha_wraps_to_tomorrows_fajr(prayer_set, at):
    next_prayer = get_next_prayer(prayer_set, at(22, 0))
    assert next_prayer.key == "fajr"
    assert next_prayer.timestamp == prayer_set.fajr + DAY_SECONDS


def test_accepts_plain_mapping(prayer_set, at):
    assert get_next_prayer(prayer_set.timestamps(), at(6, 0)).key == "syuruk"


def test_next_after_is_cyclic(prayer_set, at):
    key = "fajr"
    visited = []
    for _ in range(len(PRAYER_KEYS)):
        key = get_next_prayer_after(prayer_set, key, at(12, 0)).key
        visited.append(key)
    assert visited == ["syuruk", "dhuhr", "asr", "maghrib", "isha", "fajr"]


def test_next_after_isha_is_tomorrows_fajr(prayer_set, at):
    next_prayer = get_next_prayer_after(prayer_set, "isha", at(20, 41))
    assert next_prayer.key == "fajr"
    assert next_prayer.timestamp == prayer_set.fajr + DAY_SECONDS


def test_next_after_unknown_key_uses_clock(prayer_set, at):
    assert get_next_prayer_after(prayer_set, "tahajjud", at(17, 0)).key == "maghrib"


def test_time_remaining(prayer_set):
    assert get_time_remaining(prayer_set.fajr, prayer_set.fajr - 3725) == (1, 2, 5)
    assert get_time_remaining(prayer_set.fajr, prayer_set.fajr + 10) == (0, 0, 0)
    assert format_countdown(prayer_set.fajr, prayer_set.fajr - 59) == "00:00:59"


def test_prayer_set_rejects_out_of_order_times(prayer_set):
    data = prayer_set.as_dict()
    data["asr"] = data["dhuhr"]
    with pytest.raises(PrayerDataError):
        PrayerSet.from_dict(data)


def test_prayer_set_rejects_malformed_entry():
    with pytest.raises(PrayerDataError):
        PrayerSet.from_api("WLY01", {"day": 8, "fajr": "soon"})
