import tkinter as tk
from tkinter import ttk
import queue
import time
from datetime import date
from typing import Any, Callable, Dict, Optional

from waktu_dashboard.core.component_base import DashboardComponent
from waktu_dashboard.core.config import DEFAULT_ZONE
from .audio_manager import AzanPlayer
from .prayer_base import format_timestamp
from .prayer_set import PRAYER_KEYS, PRAYER_ORDER, PrayerSet
from .resolver import NextPrayer, format_countdown
from .scheduler import AzanScheduler
from .service import get_prayer_set_for
from .splashscreen import PrayerSplashscreen
from .task import PrayerTimesTask

# Syuruk marks sunrise; there is no azan to preview
TESTABLE_PRAYERS = tuple(key for key in PRAYER_KEYS if key != "syuruk")


class _AfterHandle:
    """Cancellable wrapper around a tk after() id."""

    def __init__(self, widget: tk.Misc, after_id: Optional[str]):
        self.widget = widget
        self.after_id = after_id

    def cancel(self) -> None:
        if self.after_id is not None and self.widget.winfo_exists():
            self.widget.after_cancel(self.after_id)
        self.after_id = None


class PrayerTimesComponent(DashboardComponent):
    name = "Prayer Times"

    def __init__(self, app, config: Dict[str, Any]):
        super().__init__(app, config)
        self.zone = str(config.get('zone') or DEFAULT_ZONE).upper()
        self.prayer_set: Optional[PrayerSet] = None
        self.error: Optional[str] = None
        self._tick_id: Optional[str] = None
        # Player completions, run on the tk thread by _tick
        self._completions: "queue.Queue[Callable[[], None]]" = queue.Queue()

        self.player = AzanPlayer(config)
        self.splash = PrayerSplashscreen(app.root, on_click=self.stop_azan)
        self.scheduler = AzanScheduler(
            self.player,
            splash=self.splash,
            call_later=self._call_later,
            dispatch=self._completions.put,
            tz=self.timezone,
            hide_delay=float(config.get('hide_delay', 1.0)),
            enabled=bool(config.get('enable_azan', True)),
        )
        self.scheduler.add_next_prayer_listener(self._on_next_prayer)
        self.scheduler.add_day_change_listener(self._on_day_change)

        stored = get_prayer_set_for(self.name, self.zone, self.now().date())
        if stored is not None:
            self.prayer_set = stored
            self.scheduler.load_prayer_set(stored)

        self.task = PrayerTimesTask(self.name, config)
        self.task.ensure_scheduled()
        self.app.task_manager.register_task(self.name, self.task.run)
        self.app.task_manager.schedule_registered_task(self.name, config, self.app.config.data)

    def _call_later(self, delay: float, callback: Callable[[], None]) -> _AfterHandle:
        return _AfterHandle(self.app.root, self.app.root.after(int(delay * 1000), callback))

    def initialize(self, parent: tk.Frame) -> None:
        super().initialize(parent)
        padding = self.get_responsive_padding()
        container = tk.Frame(self.frame, relief=tk.GROOVE, borderwidth=1)
        container.pack(padx=padding['small'], pady=padding['small'], fill=tk.BOTH, expand=True)

        header_frame = tk.Frame(container)
        header_frame.pack(fill=tk.X, padx=padding['medium'], pady=(padding['small'], 0))
        self.create_label(header_frame, text=self.headline, font_size='heading', bold=True).pack(side=tk.LEFT)

        refresh_button = self.create_label(header_frame, text="↻", font_size='heading', color='muted', cursor="hand2")
        refresh_button.pack(side=tk.RIGHT, padx=(0, padding['small']))
        refresh_button.bind('<Button-1>', lambda e: self.refresh(force_fetch=True))

        self.zone_label = self.create_label(header_frame, text=self.zone, font_size='small', color='muted')
        self.zone_label.pack(side=tk.RIGHT, padx=padding['small'])

        self.hijri_label = self.create_label(container, text="", font_size='small', color='muted')
        self.hijri_label.pack(anchor='w', padx=padding['medium'])

        table_frame = tk.Frame(container)
        table_frame.pack(fill=tk.BOTH, expand=True, padx=padding['medium'], pady=padding['small'])

        self.name_labels: Dict[str, tk.Label] = {}
        self.time_labels: Dict[str, tk.Label] = {}
        self.stop_icons: Dict[str, tk.Label] = {}
        show_test_buttons = self.config.get('show_test_buttons', True)

        for row, (key, name, local_name) in enumerate(PRAYER_ORDER):
            name_label = self.create_label(table_frame, text=f"{name} ({local_name})", anchor='w')
            name_label.grid(row=row, column=0, sticky='w', padx=padding['small'], pady=2)
            self.name_labels[key] = name_label

            time_label = self.create_label(table_frame, text="--:--", bold=True)
            time_label.grid(row=row, column=1, sticky='e', padx=padding['small'], pady=2)
            self.time_labels[key] = time_label

            stop_icon = self.create_label(table_frame, text="⏹", font_size='small', color='accent', cursor="hand2")
            stop_icon.bind('<Button-1>', lambda e: self.stop_azan())
            self.stop_icons[key] = stop_icon

            if show_test_buttons and key in TESTABLE_PRAYERS:
                ttk.Button(
                    table_frame,
                    text="Test",
                    width=5,
                    command=lambda k=key: self.test_azan(k),
                ).grid(row=row, column=3, padx=padding['small'], pady=2)

        table_frame.columnconfigure(0, weight=1)

        self.countdown_label = self.create_label(container, text="", font_size='title', color='accent')
        self.countdown_label.pack(padx=padding['medium'], pady=(padding['small'], 0))

        self.error_label = self.create_label(container, text="", font_size='small', color='error',
                                             wraplength=320, cursor="hand2")
        self.error_label.pack(pady=padding['small'])
        self.error_label.bind('<Button-1>', lambda e: self._reset_zone())

        self.update()
        self._tick()

    def _tick(self) -> None:
        """1 Hz: drive the azan state machine and the countdown."""
        try:
            self._run_completions()
            self.scheduler.tick(time.time())
            self._update_countdown()
            self._update_playing_state()
        except Exception as e:
            self.logger.error(f"Error in prayer tick: {e}", exc_info=True)
        self._tick_id = self.schedule(1000, self._tick)

    def _run_completions(self) -> None:
        while True:
            try:
                callback = self._completions.get_nowait()
            except queue.Empty:
                return
            callback()

    def _update_countdown(self) -> None:
        next_prayer = self.scheduler.next_prayer
        if next_prayer is None:
            self.countdown_label.config(text="")
            return
        countdown = format_countdown(next_prayer.timestamp, int(time.time()))
        self.countdown_label.config(text=f"{next_prayer.name} in {countdown}")

    def _update_playing_state(self) -> None:
        active = self.scheduler.status()["active_key"]
        for key, icon in self.stop_icons.items():
            if key == active:
                icon.grid(row=list(self.stop_icons).index(key), column=2)
            else:
                icon.grid_forget()

    def update(self) -> None:
        if self.frame is None:
            return
        try:
            self.zone_label.config(text=self.zone)
            if self.error:
                self.error_label.config(text=f"{self.error}\nClick to reset to {DEFAULT_ZONE}")
            else:
                self.error_label.config(text="")

            if self.prayer_set is None:
                for label in self.time_labels.values():
                    label.config(text="--:--")
                return

            colors = self.get_font_colors()
            next_prayer = self.scheduler.next_prayer
            for key, timestamp in self.prayer_set.entries():
                self.time_labels[key].config(text=format_timestamp(timestamp, self.timezone))
                highlight = next_prayer is not None and next_prayer.key == key
                self.name_labels[key].config(fg=colors['accent'] if highlight else colors['text'])
            self.hijri_label.config(text=self.prayer_set.hijri or "")
            self._update_countdown()
        except Exception as e:
            self.logger.error(f"Error updating prayer times display: {e}", exc_info=True)

    def handle_background_result(self, result: Any) -> None:
        """Called on the main thread with the PrayerTimesTask result."""
        if not result:
            return
        self._latest_result = result
        if result.get('zone') and result['zone'] != self.zone:
            self.logger.debug(f"Ignoring prayer times for previous zone {result['zone']}")
            return
        if 'error' in result:
            self.error = result['error']
            self.logger.error(f"Prayer times unavailable: {self.error}")
        else:
            self.error = None
            self.prayer_set = result['prayer_set']
            self.scheduler.load_prayer_set(self.prayer_set)
        self.update()

    def _on_next_prayer(self, next_prayer: NextPrayer) -> None:
        self.logger.info(f"Next prayer: {next_prayer.name} at {format_timestamp(next_prayer.timestamp, self.timezone)}")
        self.schedule(0, self.update)

    def _on_day_change(self, today: date) -> None:
        self.logger.info(f"New day {today}: fetching prayer times for {self.zone}")
        self.refresh()

    def refresh(self, force_fetch: bool = False) -> None:
        self.app.task_manager.run_task_now(self.name, force_fetch=force_fetch)

    def set_zone(self, zone: str) -> None:
        """Switch zone, persist it to the config file and fetch the new table."""
        zone = zone.upper()
        if zone == self.zone and not self.error:
            return
        self.logger.info(f"Changing zone {self.zone} -> {zone}")
        self.zone = zone
        self.error = None
        self.prayer_set = None
        self.scheduler.clear()
        self.config['zone'] = zone
        self.app.task_manager.update_task_config(self.name, self.config)
        try:
            self.app.config.save_component_config(self.name, self.config)
        except OSError as e:
            self.logger.error(f"Could not save zone to config: {e}")
        self.update()
        self.refresh()

    def _reset_zone(self) -> None:
        if self.error:
            self.set_zone(DEFAULT_ZONE)

    def test_azan(self, prayer_key: str) -> None:
        """Preview the azan for one prayer. Safe to call from any thread."""
        self.schedule(0, lambda: self.scheduler.test_trigger(prayer_key))

    def stop_azan(self) -> None:
        self.schedule(0, self.scheduler.stop)

    def get_api_data(self) -> Optional[Dict[str, Any]]:
        return {
            "zone": self.zone,
            "error": self.error,
            "prayer_times": self.prayer_set.as_dict() if self.prayer_set else None,
            "azan": self.scheduler.status(),
        }

    def _handle_config_update(self) -> None:
        self.scheduler.enabled = bool(self.config.get('enable_azan', True))
        if 'volume' in self.config:
            self.player.set_volume(self.config['volume'])
        zone = str(self.config.get('zone') or DEFAULT_ZONE).upper()
        self.app.task_manager.update_task_config(self.name, self.config)
        if zone != self.zone:
            self.set_zone(zone)
        else:
            super()._handle_config_update()

    def destroy(self) -> None:
        if self._tick_id is not None and self.frame is not None and self.frame.winfo_exists():
            self.frame.after_cancel(self._tick_id)
        self._tick_id = None
        self.scheduler.shutdown()
        self.player.shutdown()
        super().destroy()
