import math
import tkinter as tk
from typing import Any, Dict, Optional

from waktu_dashboard.core.component_base import DashboardComponent
from .qibla_service import QiblaDirection, calculate_qibla_direction, format_bearing, format_distance

DEFAULT_LAT = 3.139
DEFAULT_LON = 101.6869


class QiblaComponent(DashboardComponent):
    name = "Qibla"

    def __init__(self, app, config: Dict[str, Any]):
        super().__init__(app, config)
        self.direction: Optional[QiblaDirection] = None
        self._calculate()

    def _calculate(self) -> None:
        try:
            lat = float(self.config.get('lat', DEFAULT_LAT))
            lon = float(self.config.get('lon', DEFAULT_LON))
        except (TypeError, ValueError):
            self.logger.error(f"Invalid Qibla coordinates: {self.config.get('lat')}, {self.config.get('lon')}")
            self.direction = None
            return
        self.direction = calculate_qibla_direction(lat, lon)
        self.logger.info(f"Qibla from {lat}, {lon}: {self.direction}")

    def initialize(self, parent: tk.Frame) -> None:
        super().initialize(parent)
        padding = self.get_responsive_padding()
        container = self.create_container()
        size = int(self.config.get('compass_size', 140))
        self.canvas = tk.Canvas(container, width=size, height=size, highlightthickness=0,
                                bg=self.config_data.get('window', {}).get('background_color', '#0f172a'))
        self.canvas.pack(pady=padding['small'])
        self.info_label = self.create_label(container, text="", font_size='title', bold=True)
        self.info_label.pack()
        self.distance_label = self.create_label(container, text="", font_size='small', color='muted')
        self.distance_label.pack(pady=(0, padding['small']))
        self.update()

    def _draw_compass(self) -> None:
        colors = self.get_font_colors()
        size = int(self.canvas['width'])
        center, radius = size / 2, size / 2 - 10
        self.canvas.delete('all')
        self.canvas.create_oval(center - radius, center - radius, center + radius, center + radius,
                                outline=colors['muted'], width=2)
        for label, angle in (('N', 0), ('E', 90), ('S', 180), ('W', 270)):
            x = center + (radius - 12) * math.sin(math.radians(angle))
            y = center - (radius - 12) * math.cos(math.radians(angle))
            self.canvas.create_text(x, y, text=label, fill=colors['muted'])
        if self.direction is None:
            return
        angle = math.radians(self.direction.bearing)
        tip_x = center + (radius - 20) * math.sin(angle)
        tip_y = center - (radius - 20) * math.cos(angle)
        self.canvas.create_line(center, center, tip_x, tip_y, fill=colors['accent'], width=4, arrow=tk.LAST)

    def update(self) -> None:
        if self.frame is None:
            return
        self._draw_compass()
        if self.direction is None:
            self.info_label.config(text="Location unavailable")
            self.distance_label.config(text="")
            return
        self.info_label.config(text=f"{format_bearing(self.direction.bearing)} {self.direction.cardinal}")
        self.distance_label.config(text=f"{format_distance(self.direction.distance)} to the Ka'bah")

    def _handle_config_update(self) -> None:
        self._calculate()
        super()._handle_config_update()

    def get_api_data(self) -> Optional[Dict[str, Any]]:
        return self.direction.as_dict() if self.direction else None
