"""
Background task: probe zones for working prayer tables every few hours.
"""
from typing import Any, Dict, Optional

from waktu_dashboard.core.task import BaseTask, interval_schedule, update_after_run
from waktu_dashboard.plugins.zones.zone_service import DEFAULT_CACHE_TTL, ZoneChecker


class ZoneCheckTask(BaseTask):
    """Publish {"zones": [...], "total": n} with the zones that currently answer."""

    def __init__(self, component_name: str, config: Dict[str, Any]):
        schedule_type, schedule_config = interval_schedule(config, int(DEFAULT_CACHE_TTL), minimum=600)
        super().__init__(component_name, schedule_type, schedule_config)
        self.config = config

    def run(
        self,
        config: Dict[str, Any],
        result_queue: Any,
        config_data: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> None:
        cfg = dict(config)
        cache_dir = ((config_data or {}).get("cache") or {}).get("directory")
        if cache_dir:
            cfg.setdefault("cache_dir", cache_dir)
        checker = ZoneChecker(cfg)
        zones = checker.get_working_zones(force=kwargs.get("force_fetch", False))
        update_after_run(self.component_name)
        self.publish(result_queue, {"zones": zones, "total": len(checker.zones)})
