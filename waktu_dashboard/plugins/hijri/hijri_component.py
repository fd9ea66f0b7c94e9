import tkinter as tk
from datetime import date
from typing import Any, Dict, Optional

from waktu_dashboard.core.component_base import DashboardComponent
from .hijri_calendar import HijriMonthData, get_hijri_month_data

WEEKDAYS = ("Ahd", "Isn", "Sel", "Rab", "Kha", "Jum", "Sab")


class HijriCalendarComponent(DashboardComponent):
    name = "Hijri Calendar"

    def __init__(self, app, config: Dict[str, Any]):
        super().__init__(app, config)
        self.month_data: Optional[HijriMonthData] = None
        self._shown_date: Optional[date] = None
        self._timer_id: Optional[str] = None

    def initialize(self, parent: tk.Frame) -> None:
        super().initialize(parent)
        padding = self.get_responsive_padding()
        container = self.create_container()
        self.title_label = self.create_label(container, text="", font_size='title', bold=True)
        self.title_label.pack(padx=padding['medium'])
        self.grid_frame = tk.Frame(container)
        self.grid_frame.pack(padx=padding['medium'], pady=padding['small'])
        self._refresh()

    def _refresh(self) -> None:
        today = self.now().date()
        if today != self._shown_date:
            self.month_data = get_hijri_month_data(today)
            self._shown_date = today
            self.update()
        self._timer_id = self.schedule(60000, self._refresh)

    def update(self) -> None:
        if self.frame is None or self.month_data is None:
            return
        data = self.month_data
        self.title_label.config(text=f"{data.today.day} {data.month_name} {data.year}H  {data.month_name_arabic}")

        for child in self.grid_frame.winfo_children():
            child.destroy()
        for column, weekday in enumerate(WEEKDAYS):
            self.create_label(self.grid_frame, text=weekday, font_size='tiny', color='muted').grid(row=0, column=column)
        for offset, entry in enumerate(data.days, start=data.first_day_of_week):
            label = self.create_label(
                self.grid_frame,
                text=str(entry['day']),
                font_size='small',
                bold=entry['is_today'],
                color='accent' if entry['is_today'] else None,
                width=3,
            )
            label.grid(row=1 + offset // 7, column=offset % 7)

    def get_api_data(self) -> Optional[Dict[str, Any]]:
        data = self.month_data or get_hijri_month_data(self.now().date())
        return data.as_dict()

    def destroy(self) -> None:
        if self._timer_id is not None and self.frame is not None and self.frame.winfo_exists():
            self.frame.after_cancel(self._timer_id)
        super().destroy()
