"""
Quran verse of the day from quranapi.pages.dev.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import requests

from waktu_dashboard.core.cache_helper import CacheHelper

DEFAULT_API_BASE = "https://quranapi.pages.dev/api"
DAILY_VERSE_CACHE_KEY = "daily-verse-cache"
DAILY_VERSE_TTL = 24 * 3600

# (surah, ayah)
DAILY_VERSES: List[Tuple[int, int]] = [
    (1, 1), (2, 153), (2, 255), (2, 286), (3, 190), (4, 103), (6, 162), (13, 28),
    (20, 5), (20, 14), (24, 35), (27, 62), (28, 77), (29, 69), (30, 21), (31, 14),
    (33, 35), (35, 3), (39, 53), (40, 60), (41, 30), (42, 36), (46, 15), (48, 4),
    (49, 13), (57, 4), (57, 20), (58, 11), (59, 23), (62, 9), (64, 16), (65, 3),
    (67, 2), (70, 19), (73, 8), (76, 8), (87, 7), (93, 11), (94, 5), (94, 6),
    (95, 5), (103, 2), (108, 2), (112, 1), (113, 1), (114, 1),
]

FALLBACK_VERSE: Dict[str, Any] = {
    "surahName": "Ar-Ra'd",
    "surahNameArabic": "الرعد",
    "surahNameTranslation": "The Thunder",
    "surahNo": 13,
    "ayahNo": 28,
    "english": "Those who have believed and whose hearts are assured by the remembrance of Allah. "
               "Unquestionably, by the remembrance of Allah hearts are assured.",
    "arabic1": "الَّذِينَ آمَنُوا وَتَطْمَئِنُّ قُلُوبُهُم بِذِكْرِ اللَّهِ ۗ أَلَا بِذِكْرِ اللَّهِ تَطْمَئِنُّ الْقُلُوبُ",
}


class QuranApiError(Exception):
    """Verse API unreachable, non-OK, or missing the verse fields."""


def select_daily_verse(day: date) -> Tuple[int, int]:
    """Same verse all day: indexed by day of month."""
    return DAILY_VERSES[day.day % len(DAILY_VERSES)]


def format_verse_reference(verse: Dict[str, Any]) -> str:
    """e.g. "Al-Baqarah 2:255" """
    return f"{verse['surahName']} {verse['surahNo']}:{verse['ayahNo']}"


class QuranService:
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.logger = logging.getLogger(self.__class__.__name__)
        self.cache_helper = CacheHelper(self.config.get('cache_dir'), "verse")

    @property
    def api_base(self) -> str:
        return str(self.config.get('api_base', DEFAULT_API_BASE)).rstrip('/')

    def fetch_verse(self, surah: int, ayah: int) -> Dict[str, Any]:
        url = f"{self.api_base}/{surah}/{ayah}.json"
        try:
            response = requests.get(url, timeout=self.config.get('timeout', 15))
        except requests.exceptions.RequestException as e:
            raise QuranApiError(f"Could not reach Quran API: {e}") from e
        if not response.ok:
            raise QuranApiError(f"Quran API Error: {response.status_code} {response.reason}")
        try:
            data = response.json()
        except ValueError as e:
            raise QuranApiError("Quran API returned invalid JSON") from e
        if not isinstance(data, dict) or not data.get('surahName'):
            raise QuranApiError("Invalid Quran API response")
        return data

    def get_daily_verse(self, today: date) -> Dict[str, Any]:
        """Today's verse, cached for 24 hours. Raises QuranApiError when it cannot be fetched."""
        cached = self.cache_helper.get(DAILY_VERSE_CACHE_KEY, max_age=DAILY_VERSE_TTL)
        if cached and cached.get('date') == today.isoformat():
            self.logger.debug(f"Using cached verse {format_verse_reference(cached['verse'])}")
            return cached['verse']

        surah, ayah = select_daily_verse(today)
        self.logger.info(f"Fetching verse {surah}:{ayah} for {today}")
        verse = self.fetch_verse(surah, ayah)
        self.cache_helper.set(DAILY_VERSE_CACHE_KEY, {'date': today.isoformat(), 'verse': verse})
        return verse
