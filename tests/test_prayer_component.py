import queue

from waktu_dashboard.plugins.prayer.prayer_component import TESTABLE_PRAYERS, PrayerTimesComponent


def test_syuruk_has_no_test_button():
    assert "syuruk" not in TESTABLE_PRAYERS
    assert TESTABLE_PRAYERS == ("fajr", "dhuhr", "asr", "maghrib", "isha")


def test_queued_completions_run_in_order_on_tick():
    component = PrayerTimesComponent.__new__(PrayerTimesComponent)
    component._completions = queue.Queue()
    ran = []
    component._completions.put(lambda: ran.append("first"))
    component._completions.put(lambda: ran.append("second"))

    component._run_completions()

    assert ran == ["first", "second"]
    assert component._completions.empty()
