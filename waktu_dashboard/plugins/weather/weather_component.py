import tkinter as tk
from typing import Dict, Any, Optional

from waktu_dashboard.core.component_base import DashboardComponent
from .service import get_saved_forecast
from .task import WeatherTask, resolve_location
from .weather_backend import get_current_forecast


class WeatherComponent(DashboardComponent):
    name = "Weather"

    def __init__(self, app, config: Dict[str, Any]):
        super().__init__(app, config)
        self.location = resolve_location(config, self.config_data)
        self._latest_result = get_saved_forecast(self.name, self.location)

        self.task = WeatherTask(self.name, config)
        self.task.ensure_scheduled()
        self.app.task_manager.register_task(self.name, self.task.run)
        self.app.task_manager.schedule_registered_task(self.name, config, self.config_data)

    def get_api_data(self) -> Optional[Dict[str, Any]]:
        return self._latest_result

    def handle_background_result(self, result: Any) -> None:
        """Called when the task finishes; None means no forecast has ever been saved"""
        if result is None:
            return
        self._latest_result = result
        self.schedule(0, self.update)

    def initialize(self, parent: tk.Frame) -> None:
        super().initialize(parent)
        padding = self.get_responsive_padding()
        container = self.create_container()

        self.location_label = self.create_label(container, text=self.location, font_size='small', color='muted')
        self.location_label.pack(anchor='w', padx=padding['medium'])
        self.temp_label = self.create_label(container, text="--°C", font_size='display', bold=True)
        self.temp_label.pack(padx=padding['medium'])
        self.forecast_label = self.create_label(container, text="", wraplength=300)
        self.forecast_label.pack(padx=padding['medium'])
        self.summary_label = self.create_label(container, text="", font_size='small', color='muted', wraplength=300)
        self.summary_label.pack(padx=padding['medium'], pady=(0, padding['small']))
        self.update()

    def update(self) -> None:
        if self.frame is None:
            return
        self.location_label.config(text=self.location)
        entry = (self._latest_result or {}).get('today')
        if not entry:
            self.temp_label.config(text="--°C")
            self.forecast_label.config(text="Weather unavailable")
            self.summary_label.config(text="")
            return
        self.temp_label.config(text=f"{entry.get('min_temp', '--')}-{entry.get('max_temp', '--')}°C")
        self.forecast_label.config(text=get_current_forecast(entry, self.now().hour))
        summary = " ".join(part for part in (entry.get('summary_forecast'), entry.get('summary_when')) if part)
        self.summary_label.config(text=summary)

    def _handle_config_update(self) -> None:
        location = resolve_location(self.config, self.config_data)
        self.app.task_manager.update_task_config(self.name, self.config)
        if location != self.location:
            self.logger.info(f"Weather location changed {self.location} -> {location}")
            self.location = location
            self._latest_result = get_saved_forecast(self.name, location)
            # Re-register so the task reads the reloaded app config
            self.app.task_manager.schedule_registered_task(self.name, self.config, self.config_data)
            self.app.task_manager.run_task_now(self.name, force_fetch=True)
        super()._handle_config_update()
