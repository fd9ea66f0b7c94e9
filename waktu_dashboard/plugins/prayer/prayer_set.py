"""
One day's prayer timestamps for a zone, as returned by the e-Solat table.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Mapping, Optional, Tuple

# Fixed display and trigger order: (key, name, Malay name)
PRAYER_ORDER: Tuple[Tuple[str, str, str], ...] = (
    ("fajr", "Fajr", "Subuh"),
    ("syuruk", "Syuruk", "Syuruk"),
    ("dhuhr", "Dhuhr", "Zohor"),
    ("asr", "Asr", "Asar"),
    ("maghrib", "Maghrib", "Maghrib"),
    ("isha", "Isha", "Isyak"),
)

PRAYER_KEYS: Tuple[str, ...] = tuple(key for key, _, _ in PRAYER_ORDER)
PRAYER_NAMES: Dict[str, str] = {key: name for key, name, _ in PRAYER_ORDER}
PRAYER_LOCAL_NAMES: Dict[str, str] = {key: local for key, _, local in PRAYER_ORDER}


class PrayerDataError(ValueError):
    """The provider answered, but not with a usable prayer table."""


@dataclass(frozen=True)
class PrayerSet:
    zone: str
    day: int
    fajr: int
    syuruk: int
    dhuhr: int
    asr: int
    maghrib: int
    isha: int
    hijri: Optional[str] = None

    def __post_init__(self):
        ordered = [getattr(self, key) for key in PRAYER_KEYS]
        for (earlier_key, earlier), (later_key, later) in zip(
            zip(PRAYER_KEYS, ordered), zip(PRAYER_KEYS[1:], ordered[1:])
        ):
            if later <= earlier:
                raise PrayerDataError(
                    f"{self.zone} day {self.day}: {later_key} ({later}) is not after {earlier_key} ({earlier})"
                )

    @classmethod
    def from_api(cls, zone: str, entry: Mapping[str, Any]) -> "PrayerSet":
        """Build from one element of the provider's `prayers` array."""
        try:
            times = {key: int(entry[key]) for key in PRAYER_KEYS}
            day = int(entry["day"])
        except (KeyError, TypeError, ValueError) as e:
            raise PrayerDataError(f"Malformed prayer entry for {zone}: {e!r}") from e
        return cls(zone=zone, day=day, hijri=entry.get("hijri"), **times)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PrayerSet":
        return cls.from_api(data["zone"], data)

    def entries(self) -> List[Tuple[str, int]]:
        """(key, timestamp) pairs in prayer order"""
        return [(key, getattr(self, key)) for key in PRAYER_KEYS]

    def timestamps(self) -> Dict[str, int]:
        return dict(self.entries())

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)
