import tkinter as tk
from typing import Any, Dict, Optional

from waktu_dashboard.core.component_base import DashboardComponent
from .greeting import get_islamic_greeting


class ClockComponent(DashboardComponent):
    name = "Clock"

    def __init__(self, app, config: Dict[str, Any]):
        super().__init__(app, config)
        self._timer_id: Optional[str] = None

    def initialize(self, parent: tk.Frame) -> None:
        super().initialize(parent)
        padding = self.get_responsive_padding()
        container = tk.Frame(self.frame, relief=tk.GROOVE, borderwidth=1)
        container.pack(padx=padding['small'], pady=padding['small'], fill=tk.BOTH, expand=True)

        self.time_label = self.create_label(container, text="", font_size='display', bold=True)
        self.time_label.pack(pady=(padding['medium'], 0))
        self.date_label = self.create_label(container, text="", font_size='heading')
        self.date_label.pack()
        self.greeting_label = self.create_label(container, text="", font_size='title', color='accent')
        self.greeting_label.pack(pady=(padding['small'], 0))
        self.quote_label = self.create_label(container, text="", font_size='small', color='muted')
        self.quote_label.pack(pady=(0, padding['medium']))
        self.update()

    def update(self) -> None:
        if self.frame is None:
            return
        now = self.now()
        time_format = "%H:%M:%S" if self.config.get('format_24h', False) else "%I:%M:%S %p"
        self.time_label.config(text=now.strftime(time_format).lstrip("0"))
        self.date_label.config(text=f"{now:%A}, {now:%B} {now.day}, {now.year}")
        greeting, quote = get_islamic_greeting(now.hour)
        self.greeting_label.config(text=greeting)
        self.quote_label.config(text=quote)
        self._timer_id = self.schedule(1000, self.update)

    def get_api_data(self) -> Optional[Dict[str, Any]]:
        now = self.now()
        greeting, quote = get_islamic_greeting(now.hour)
        return {"time": now.isoformat(), "greeting": greeting, "quote": quote}

    def _handle_config_update(self) -> None:
        # update() reschedules itself; only the format may have changed
        pass

    def destroy(self) -> None:
        if self._timer_id is not None and self.frame is not None and self.frame.winfo_exists():
            self.frame.after_cancel(self._timer_id)
        super().destroy()
