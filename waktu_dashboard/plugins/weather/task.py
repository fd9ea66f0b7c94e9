"""
Background task: fetch the forecast for the widget's location, save via service, persist next_run in DB.
"""
from typing import Any, Dict, Optional

from waktu_dashboard.core.config import DEFAULT_TIMEZONE, DEFAULT_ZONE
from waktu_dashboard.core.task import BaseTask, interval_schedule, update_after_run
from waktu_dashboard.plugins.weather.service import get_saved_forecast, save_forecast
from waktu_dashboard.plugins.weather.weather_backend import (
    MetMalaysiaBackend,
    WeatherApiError,
    map_zone_to_weather_location,
)

PRAYER_COMPONENT = "Prayer Times"


def resolve_location(config: Dict[str, Any], config_data: Optional[Dict[str, Any]]) -> str:
    """Configured location, else the one mapped from the prayer zone."""
    if config.get("location"):
        return str(config["location"])
    prayer_config = ((config_data or {}).get("components") or {}).get(PRAYER_COMPONENT) or {}
    return map_zone_to_weather_location(prayer_config.get("zone") or DEFAULT_ZONE)


class WeatherTask(BaseTask):
    """Fetch hourly; on failure republish the last saved forecast."""

    def __init__(self, component_name: str, config: Dict[str, Any]):
        schedule_type, schedule_config = interval_schedule(config, 3600)
        super().__init__(component_name, schedule_type, schedule_config)
        self.config = config

    def run(
        self,
        config: Dict[str, Any],
        result_queue: Any,
        config_data: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> None:
        location = resolve_location(config, config_data)
        backend = MetMalaysiaBackend(self._backend_config(config, config_data))
        try:
            data = backend.get_weather(location, force_fetch=kwargs.get("force_fetch", False))
        except WeatherApiError as e:
            self.logger.warning(f"Weather unavailable for {location}: {e}")
            update_after_run(self.component_name, error=str(e))
            self.publish(result_queue, get_saved_forecast(self.component_name, location))
            return

        save_forecast(self.component_name, data)
        self.logger.info(f"Weather: saved forecast for {location}")
        update_after_run(self.component_name)
        self.publish(result_queue, data)

    @staticmethod
    def _backend_config(config: Dict[str, Any], config_data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        cfg = dict(config)
        config_data = config_data or {}
        cache_dir = (config_data.get("cache") or {}).get("directory")
        if cache_dir:
            cfg.setdefault("cache_dir", cache_dir)
        cfg.setdefault("timezone", config_data.get("timezone", DEFAULT_TIMEZONE))
        return cfg
