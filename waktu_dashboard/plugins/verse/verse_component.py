import tkinter as tk
from typing import Any, Dict, Optional

from waktu_dashboard.core.component_base import DashboardComponent
from .quran_service import FALLBACK_VERSE, format_verse_reference
from .task import DailyVerseTask


class DailyVerseComponent(DashboardComponent):
    name = "Daily Verse"

    def __init__(self, app, config: Dict[str, Any]):
        super().__init__(app, config)
        self._latest_result = {"verse": FALLBACK_VERSE, "fallback": True}

        self.task = DailyVerseTask(self.name, config)
        self.task.ensure_scheduled()
        self.app.task_manager.register_task(self.name, self.task.run)
        self.app.task_manager.schedule_registered_task(self.name, config, self.config_data)

    def initialize(self, parent: tk.Frame) -> None:
        super().initialize(parent)
        padding = self.get_responsive_padding()
        container = self.create_container()
        wrap = int(self.config.get('wraplength', 360))

        self.arabic_label = self.create_label(container, text="", font_size='title', wraplength=wrap, justify=tk.RIGHT)
        self.arabic_label.pack(anchor='e', padx=padding['medium'], pady=padding['small'])
        self.translation_label = self.create_label(container, text="", wraplength=wrap, justify=tk.LEFT)
        self.translation_label.pack(anchor='w', padx=padding['medium'])
        self.reference_label = self.create_label(container, text="", font_size='small', color='muted')
        self.reference_label.pack(anchor='e', padx=padding['medium'], pady=(0, padding['small']))
        self.update()

    def handle_background_result(self, result: Any) -> None:
        if not result:
            return
        # Keep a fetched verse rather than replacing it with the static one
        if result.get('fallback') and not self._latest_result.get('fallback'):
            return
        self._latest_result = result
        self.schedule(0, self.update)

    def update(self) -> None:
        if self.frame is None:
            return
        verse = self._latest_result['verse']
        self.arabic_label.config(text=verse.get('arabic1', ''))
        self.translation_label.config(text=verse.get('english', ''))
        self.reference_label.config(text=format_verse_reference(verse))

    def get_api_data(self) -> Optional[Dict[str, Any]]:
        return {**self._latest_result, "reference": format_verse_reference(self._latest_result['verse'])}
