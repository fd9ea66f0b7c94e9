"""
Pure next-prayer calculations over a day's PrayerSet.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Tuple, Union

from .prayer_set import PRAYER_KEYS, PRAYER_NAMES, PrayerSet

DAY_SECONDS = 86400

PrayerTimes = Union[PrayerSet, Mapping[str, int]]


@dataclass(frozen=True)
class NextPrayer:
    name: str
    key: str
    timestamp: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _timestamps(prayers: PrayerTimes) -> Mapping[str, int]:
    if isinstance(prayers, PrayerSet):
        return prayers.timestamps()
    return prayers


def get_next_prayer(prayers: PrayerTimes, now: int) -> NextPrayer:
    """First prayer strictly after now; tomorrow's Fajr once Isha has passed.

    A prayer whose timestamp equals now counts as passed.
    """
    times = _timestamps(prayers)
    for key in PRAYER_KEYS:
        timestamp = times.get(key)
        if timestamp is not None and timestamp > now:
            return NextPrayer(PRAYER_NAMES[key], key, int(timestamp))
    return NextPrayer(PRAYER_NAMES["fajr"], "fajr", int(times["fajr"]) + DAY_SECONDS)


def get_next_prayer_after(prayers: PrayerTimes, current_key: str, now: int) -> NextPrayer:
    """Prayer following current_key in the fixed order, wrapping Isha to tomorrow's Fajr.

    Unknown keys fall back to get_next_prayer(prayers, now).
    """
    if current_key not in PRAYER_KEYS:
        return get_next_prayer(prayers, now)

    times = _timestamps(prayers)
    index = (PRAYER_KEYS.index(current_key) + 1) % len(PRAYER_KEYS)
    key = PRAYER_KEYS[index]
    timestamp = int(times[key])
    if index == 0:
        timestamp += DAY_SECONDS
    return NextPrayer(PRAYER_NAMES[key], key, timestamp)


def get_time_remaining(timestamp: int, now: int) -> Tuple[int, int, int]:
    """(hours, minutes, seconds) until timestamp, zero once it has passed"""
    diff = int(timestamp) - int(now)
    if diff <= 0:
        return 0, 0, 0
    return diff // 3600, (diff % 3600) // 60, diff % 60


def format_countdown(timestamp: int, now: int) -> str:
    hours, minutes, seconds = get_time_remaining(timestamp, now)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
