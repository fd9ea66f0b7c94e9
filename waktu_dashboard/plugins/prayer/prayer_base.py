import requests
from datetime import date, datetime
from typing import Dict, Any, Optional
import logging
from abc import ABC, abstractmethod
from zoneinfo import ZoneInfo

from waktu_dashboard.core.cache_helper import CacheHelper
from waktu_dashboard.core.config import DEFAULT_TIMEZONE
from .prayer_set import PrayerDataError, PrayerSet

DEFAULT_API_BASE = "https://api.waktusolat.app"


class PrayerApiError(Exception):
    """The prayer-time provider could not be reached or returned an error status."""


def format_timestamp(timestamp: int, tz: Optional[ZoneInfo] = None) -> str:
    """Epoch seconds as a 12-hour wall-clock time in tz, e.g. "5:45 AM"."""
    tz = tz or ZoneInfo(DEFAULT_TIMEZONE)
    return datetime.fromtimestamp(int(timestamp), tz).strftime("%I:%M %p").lstrip("0")


class PrayerBackend(ABC):
    """Base class for prayer time providers"""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)
        self.cache_helper = CacheHelper(config.get('cache_dir'), "prayer_times")

    @abstractmethod
    def get_prayer_times(self, zone: str, today: Optional[date] = None, force_fetch: bool = False) -> PrayerSet:
        """Get today's prayer times for a zone
        Args:
            zone: JAKIM e-Solat zone code, e.g. "WLY01"
            today: local date to look up, defaults to today
            force_fetch: If True, bypass cache and fetch fresh data
        Raises:
            PrayerApiError: provider unreachable or non-OK status
            PrayerDataError: response has no usable entry for the day
        """
        pass


class WaktuSolatBackend(PrayerBackend):
    """Prayer times backend using api.waktusolat.app (JAKIM e-Solat tables)"""

    @property
    def api_base(self) -> str:
        return str(self.config.get('api_base', DEFAULT_API_BASE)).rstrip('/')

    def fetch_prayer_times(self, zone: str) -> Dict[str, Any]:
        """Fetch the zone's table for the current month: {"prayers": [{day, fajr, ...}, ...]}"""
        url = f"{self.api_base}/v2/solat/{zone}"
        self.logger.info(f"Fetching prayer times from {url}")
        try:
            response = requests.get(url, timeout=self.config.get('timeout', 15))
        except requests.exceptions.RequestException as e:
            raise PrayerApiError(f"Could not reach prayer time API for {zone}: {e}") from e

        if not response.ok:
            raise PrayerApiError(f"API Error: {response.status_code} {response.reason}")

        try:
            data = response.json()
        except ValueError as e:
            raise PrayerDataError(f"Prayer time API returned invalid JSON for {zone}") from e

        if not isinstance(data, dict) or not isinstance(data.get('prayers'), list):
            raise PrayerDataError("Invalid API response format")
        return data

    def get_prayer_times(self, zone: str, today: Optional[date] = None, force_fetch: bool = False) -> PrayerSet:
        today = today or datetime.now(ZoneInfo(self.config.get('timezone', DEFAULT_TIMEZONE))).date()
        cache_key = f"solat_{zone}_{today.strftime('%Y-%m')}"

        data = None
        if not force_fetch:
            data = self.cache_helper.get(cache_key)
            if data:
                self.logger.debug(f"Using cached prayer table for {zone}")

        if not data:
            data = self.fetch_prayer_times(zone)
            self.cache_helper.set(cache_key, data)

        entry = next((p for p in data['prayers'] if p.get('day') == today.day), None)
        if entry is None:
            raise PrayerDataError(f"Prayer times for {today.isoformat()} not found in {zone} table")

        prayer_set = PrayerSet.from_api(zone, entry)
        self.logger.info(f"Prayer times for {zone} on {today}: {prayer_set.timestamps()}")
        return prayer_set
