"""
Background task: load the verse of the day (cached) and hand it to the widget.
"""
from datetime import datetime
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from waktu_dashboard.core.config import DEFAULT_TIMEZONE
from waktu_dashboard.core.task import BaseTask, interval_schedule, update_after_run
from waktu_dashboard.plugins.verse.quran_service import FALLBACK_VERSE, QuranApiError, QuranService


class DailyVerseTask(BaseTask):
    """Publish {"verse": {...}, "fallback": bool}; the static verse is used when the API fails."""

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
        config_data = config_data or {}
        cfg = dict(config)
        cache_dir = (config_data.get("cache") or {}).get("directory")
        if cache_dir:
            cfg.setdefault("cache_dir", cache_dir)
        today = datetime.now(ZoneInfo(config_data.get("timezone", DEFAULT_TIMEZONE))).date()

        try:
            verse = QuranService(cfg).get_daily_verse(today)
        except QuranApiError as e:
            self.logger.warning(f"Verse of the day unavailable: {e}")
            update_after_run(self.component_name, error=str(e))
            self.publish(result_queue, {"verse": FALLBACK_VERSE, "fallback": True})
            return

        update_after_run(self.component_name)
        self.publish(result_queue, {"verse": verse, "fallback": False})
