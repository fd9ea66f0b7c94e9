import tkinter as tk
from typing import Any, Dict, Optional

from waktu_dashboard.core.component_base import DashboardComponent
from .hadith_service import HadithService


class HadithComponent(DashboardComponent):
    name = "Hadith"

    def __init__(self, app, config: Dict[str, Any]):
        super().__init__(app, config)
        cache_dir = (self.config_data.get('cache') or {}).get('directory')
        self.service = HadithService(cache_dir)
        self._shown_hour: Optional[int] = None
        self._timer_id: Optional[str] = None

    def initialize(self, parent: tk.Frame) -> None:
        super().initialize(parent)
        padding = self.get_responsive_padding()
        container = self.create_container()
        wrap = int(self.config.get('wraplength', 360))

        self.arabic_label = self.create_label(container, text="", font_size='title', wraplength=wrap, justify=tk.RIGHT)
        self.arabic_label.pack(anchor='e', padx=padding['medium'], pady=padding['small'])
        self.malay_label = self.create_label(container, text="", wraplength=wrap, justify=tk.LEFT)
        self.malay_label.pack(anchor='w', padx=padding['medium'])
        self.source_label = self.create_label(container, text="", font_size='small', color='muted')
        self.source_label.pack(anchor='w', padx=padding['medium'], pady=(0, padding['small']))
        # Click the source line to draw a fresh collection for today
        self.source_label.bind('<Button-1>', lambda e: self.reshuffle())
        self._refresh()

    def _refresh(self) -> None:
        """Swap the hadith when the hour changes; checked every minute"""
        now = self.now()
        if now.hour != self._shown_hour:
            try:
                self._latest_result = self.service.get_hourly_hadith(now)
                self._shown_hour = now.hour
                self.update()
            except Exception as e:
                self.logger.error(f"Error loading hadith: {e}", exc_info=True)
        self._timer_id = self.schedule(60000, self._refresh)

    def reshuffle(self) -> None:
        self.service.reset_collection()
        self._latest_result = self.service.get_hourly_hadith(self.now())
        self._shown_hour = self._latest_result['hour']
        self.update()

    def update(self) -> None:
        if not self._latest_result or self.frame is None:
            return
        hadith = self._latest_result['hadith']
        self.arabic_label.config(text=hadith.arabic)
        self.malay_label.config(text=f"“{hadith.malay}”")
        self.source_label.config(
            text=f"{hadith.source}  •  {self._latest_result['index'] + 1}/{self._latest_result['total']}"
        )

    def get_api_data(self) -> Optional[Dict[str, Any]]:
        result = self._latest_result or self.service.get_hourly_hadith(self.now())
        return {**result, "hadith": result['hadith'].as_dict()}

    def destroy(self) -> None:
        if self._timer_id is not None and self.frame is not None and self.frame.winfo_exists():
            self.frame.after_cancel(self._timer_id)
        super().destroy()
