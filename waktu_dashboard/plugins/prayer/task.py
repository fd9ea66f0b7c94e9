"""
Background task: fetch today's prayer times for the configured zone, save via service,
persist next_run in DB. When the provider is unreachable the last stored table for
today is used instead.
"""
from datetime import datetime
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from waktu_dashboard.core.config import DEFAULT_TIMEZONE, DEFAULT_ZONE
from waktu_dashboard.core.task import BaseTask, interval_schedule, update_after_run
from waktu_dashboard.plugins.prayer.prayer_base import PrayerApiError, WaktuSolatBackend
from waktu_dashboard.plugins.prayer.prayer_set import PrayerDataError
from waktu_dashboard.plugins.prayer.service import get_prayer_set_for, save_prayer_times

DEFAULT_UPDATE_INTERVAL = 6 * 3600


class PrayerTimesTask(BaseTask):
    """Fetch today's PrayerSet and publish {"prayer_set", "zone", "date", "source"} or {"error", "zone"}."""

    def __init__(self, component_name: str, config: Dict[str, Any]):
        schedule_type, schedule_config = interval_schedule(config, DEFAULT_UPDATE_INTERVAL)
        super().__init__(component_name, schedule_type, schedule_config)
        self.config = config

    def run(
        self,
        config: Dict[str, Any],
        result_queue: Any,
        config_data: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> None:
        config_data = config_data or {}
        zone = str(config.get("zone") or DEFAULT_ZONE).upper()
        tz = ZoneInfo(config_data.get("timezone", DEFAULT_TIMEZONE))
        today = datetime.now(tz).date()
        backend = WaktuSolatBackend(self._backend_config(config, config_data))

        try:
            prayer_set = backend.get_prayer_times(zone, today=today, force_fetch=kwargs.get("force_fetch", False))
        except PrayerApiError as e:
            self.logger.warning(f"Prayer time API unavailable for {zone}: {e}")
            prayer_set = get_prayer_set_for(self.component_name, zone, today)
            if prayer_set is None:
                update_after_run(self.component_name, error=str(e))
                self.publish(result_queue, {"error": f"Unable to load prayer times for zone {zone}", "zone": zone})
                return
            self.logger.info(f"Using stored prayer times for {zone} on {today}")
            update_after_run(self.component_name, error=str(e))
            self.publish(result_queue, self._result(prayer_set, today, "database"))
            return
        except PrayerDataError as e:
            self.logger.error(f"Prayer times for {zone} unusable: {e}")
            update_after_run(self.component_name, error=str(e))
            self.publish(result_queue, {"error": f"No prayer times for zone {zone}: check the zone code", "zone": zone})
            return

        save_prayer_times(self.component_name, today, prayer_set)
        self.logger.info(f"Prayer Times: saved {zone} to DB for {today}")
        update_after_run(self.component_name)
        self.publish(result_queue, self._result(prayer_set, today, "api"))

    @staticmethod
    def _result(prayer_set, today, source: str) -> Dict[str, Any]:
        return {"prayer_set": prayer_set, "zone": prayer_set.zone, "date": today.isoformat(), "source": source}

    @staticmethod
    def _backend_config(config: Dict[str, Any], config_data: Dict[str, Any]) -> Dict[str, Any]:
        cfg = dict(config)
        cache_dir = (config_data.get("cache") or {}).get("directory")
        if cache_dir and "cache_dir" not in cfg:
            cfg["cache_dir"] = cache_dir
        cfg.setdefault("timezone", config_data.get("timezone", DEFAULT_TIMEZONE))
        return cfg
