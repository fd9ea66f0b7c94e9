from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Dict, Any, List, Optional
import logging
import requests
from zoneinfo import ZoneInfo

from waktu_dashboard.core.cache_helper import CacheHelper
from waktu_dashboard.core.config import DEFAULT_TIMEZONE

DEFAULT_API_BASE = "https://api.data.gov.my/weather/forecast"
DEFAULT_LOCATION = "Kuala Lumpur"

# Prayer zone -> data.gov.my forecast location_name
ZONE_WEATHER_LOCATIONS: Dict[str, str] = {
    'WLY01': 'Kuala Lumpur',
    'WLY02': 'Putrajaya',
    'SGR01': 'Gombak',
    'SGR02': 'Shah Alam',
    'SGR03': 'Klang',
    'SGR04': 'Hulu Langat',
    'SGR05': 'Sepang',
    'SGR06': 'Kuala Selangor',
    'SGR07': 'Hulu Selangor',
    'SGR08': 'Petaling',
    'KTN01': 'Kota Setar',
    'KTN02': 'Kuala Muda',
    'KTN03': 'Kubang Pasu',
    'PHG01': 'Seberang Perai',
    'PHG02': 'Timur Laut',
    'PHG03': 'Barat Daya',
    'PLS01': 'Kinta',
    'PLS02': 'Larut Matang',
    'MLK01': 'Alor Gajah',
    'MLK02': 'Melaka Tengah',
    'JHR01': 'Johor Bahru',
    'JHR02': 'Batu Pahat',
    'KEL01': 'Kota Bharu',
    'TRG01': 'Kuala Terengganu',
    'PHT01': 'Kuantan',
}


class WeatherApiError(Exception):
    """Forecast API unreachable, non-OK, or not returning a list of forecasts."""


def map_zone_to_weather_location(zone: Optional[str]) -> str:
    """Forecast location for a prayer zone; Kuala Lumpur when the zone has no mapping."""
    return ZONE_WEATHER_LOCATIONS.get((zone or '').upper(), DEFAULT_LOCATION)


def get_current_forecast(entry: Dict[str, Any], hour: int) -> str:
    """Morning forecast before noon, afternoon before 6 pm, night otherwise."""
    if hour < 12:
        return entry.get('morning_forecast', '')
    if hour < 18:
        return entry.get('afternoon_forecast', '')
    return entry.get('night_forecast', '')


def select_forecast_for(entries: List[Dict[str, Any]], day: date) -> Optional[Dict[str, Any]]:
    """The entry dated day, else the earliest entry (the API returns several days)."""
    if not entries:
        return None
    for entry in entries:
        if entry.get('date') == day.isoformat():
            return entry
    return sorted(entries, key=lambda e: e.get('date') or '')[0]


class WeatherBackend(ABC):
    """Base class for weather data providers"""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)
        self.cache_helper = CacheHelper(config.get('cache_dir'), "weather")

    @abstractmethod
    def get_weather(self, location_name: str, force_fetch: bool = False) -> Dict[str, Any]:
        """Get forecast data for a location
        Args:
            location_name: provider location name, e.g. "Kuala Lumpur"
            force_fetch: If True, bypass cache and fetch fresh data
        Raises:
            WeatherApiError: provider unreachable or invalid response
        """
        pass


class MetMalaysiaBackend(WeatherBackend):
    """MET Malaysia forecasts published through api.data.gov.my"""

    @property
    def api_base(self) -> str:
        return str(self.config.get('api_base', DEFAULT_API_BASE))

    def fetch_weather_forecast(self, location_name: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {'contains': f"{location_name}@location__location_name"} if location_name else None
        self.logger.info(f"Fetching weather forecast for {location_name or 'all locations'}")
        try:
            response = requests.get(self.api_base, params=params, timeout=self.config.get('timeout', 15))
        except requests.exceptions.RequestException as e:
            raise WeatherApiError(f"Could not reach weather API: {e}") from e

        if not response.ok:
            raise WeatherApiError(f"Weather API Error: {response.status_code} {response.reason}")

        try:
            data = response.json()
        except ValueError as e:
            raise WeatherApiError("Weather API returned invalid JSON") from e

        if not isinstance(data, list):
            raise WeatherApiError("Invalid weather API response format")
        return data

    def get_weather(self, location_name: str, force_fetch: bool = False) -> Dict[str, Any]:
        """{"location": name, "forecasts": [...], "today": entry or None}, cached per hour"""
        tz = ZoneInfo(self.config.get('timezone', DEFAULT_TIMEZONE))
        now = datetime.now(tz)
        cache_key = f"weather_{location_name}_{now.strftime('%Y-%m-%d_%H')}"

        if not force_fetch:
            cached = self.cache_helper.get(cache_key, max_age=3600)
            if cached:
                self.logger.debug(f"Using cached forecast for {location_name}")
                return cached

        forecasts = self.fetch_weather_forecast(location_name)
        data = {
            'location': location_name,
            'forecasts': forecasts,
            'today': select_forecast_for(forecasts, now.date()),
        }
        self.cache_helper.set(cache_key, data)
        return data
