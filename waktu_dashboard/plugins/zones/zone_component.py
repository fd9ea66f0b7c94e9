import tkinter as tk
from tkinter import ttk
from typing import Any, Dict, List, Optional

from waktu_dashboard.core.component_base import DashboardComponent
from waktu_dashboard.core.config import DEFAULT_ZONE
from .task import ZoneCheckTask
from .zone_service import Zone, ZoneChecker, ZoneLookupError, find_zone, load_zones

PRAYER_COMPONENT = "Prayer Times"


class ZoneSelectorComponent(DashboardComponent):
    name = "Zones"

    def __init__(self, app, config: Dict[str, Any]):
        super().__init__(app, config)
        # All zones until the first probe finishes
        self.zones: List[Zone] = load_zones()
        self.total = len(self.zones)
        self.status = ""

        self.task = ZoneCheckTask(self.name, config)
        self.task.ensure_scheduled()
        self.app.task_manager.register_task(self.name, self.task.run)
        self.app.task_manager.schedule_registered_task(self.name, config, self.app.config.data)

    def _current_zone(self) -> str:
        prayer_config = self.app.config.get_component_config(PRAYER_COMPONENT) or {}
        return str(prayer_config.get('zone') or DEFAULT_ZONE).upper()

    def initialize(self, parent: tk.Frame) -> None:
        super().initialize(parent)
        padding = self.get_responsive_padding()
        fonts = self.get_responsive_fonts()
        container = self.create_container()

        self.selected = tk.StringVar()
        self.combo = ttk.Combobox(container, textvariable=self.selected, state='readonly',
                                  font=("Arial", fonts['small']))
        self.combo.pack(fill=tk.X, padx=padding['medium'], pady=padding['small'])
        self.combo.bind('<<ComboboxSelected>>', self._on_selected)

        buttons = tk.Frame(container)
        buttons.pack(fill=tk.X, padx=padding['medium'])
        if self.config.get('lat') is not None and self.config.get('lon') is not None:
            ttk.Button(buttons, text="Locate", command=self.locate).pack(side=tk.LEFT)
        ttk.Button(buttons, text="Re-check", command=self.refresh).pack(side=tk.RIGHT)

        self.status_label = self.create_label(container, text="", font_size='tiny', color='muted')
        self.status_label.pack(anchor='w', padx=padding['medium'], pady=(0, padding['small']))
        self.update()

    def update(self) -> None:
        if self.frame is None:
            return
        self.combo['values'] = [zone.label for zone in self.zones]
        current = find_zone(self._current_zone())
        self.selected.set(current.label if current else self._current_zone())
        status = self.status or f"{len(self.zones)} of {self.total} zones available"
        self.status_label.config(text=status)

    def handle_background_result(self, result: Any) -> None:
        if not result:
            return
        self._latest_result = result
        self.zones = result['zones']
        self.total = result.get('total', self.total)
        self.status = ""
        self.update()

    def _on_selected(self, _event=None) -> None:
        code = self.selected.get().split(" - ", 1)[0]
        self.select_zone(code)

    def select_zone(self, code: str) -> None:
        prayer = self.app.get_component(PRAYER_COMPONENT)
        if prayer is None:
            self.logger.warning("Prayer Times widget is disabled; zone not applied")
            return
        prayer.set_zone(code)
        self.status = ""
        self.update()

    def refresh(self) -> None:
        self.status = "Checking zones..."
        self.update()
        self.app.task_manager.run_task_now(self.name, force_fetch=True)

    def locate(self) -> None:
        """Resolve the configured coordinates to a zone off the UI thread."""
        lat, lon = float(self.config['lat']), float(self.config['lon'])
        self.status = "Locating..."
        self.update()

        def lookup():
            try:
                code = ZoneChecker(self.config).get_zone_by_coordinates(lat, lon)
            except ZoneLookupError as e:
                self.logger.error(f"Zone lookup failed: {e}")
                self.status = f"Zone lookup failed: {e}"
                self.schedule(0, self.update)
                return
            self.schedule(0, lambda: self.select_zone(code))

        self.app.task_manager.schedule_task(f"{self.name}_locate", lookup, 0)

    def get_api_data(self) -> Optional[Dict[str, Any]]:
        return {"zones": [zone.as_dict() for zone in self.zones], "total": self.total}
