from abc import ABC, abstractmethod
import tkinter as tk
from datetime import datetime
from typing import Optional, Dict, Any
import logging
from zoneinfo import ZoneInfo

from waktu_dashboard.core.config import DEFAULT_TIMEZONE

# Base window dimensions for responsive scaling
BASE_WINDOW_WIDTH = 800
BASE_WINDOW_HEIGHT = 600


class DashboardComponent(ABC):
    def __init__(self, app, config: Dict[str, Any]):
        self.frame: Optional[tk.Frame] = None
        self.config = config
        self.app = app
        self.logger = logging.getLogger(self.name)
        self._latest_result = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of the component"""
        pass

    @property
    def headline(self) -> str:
        """Return the display name for the component"""
        return self.config.get("headline", self.name)

    @property
    def timezone(self) -> ZoneInfo:
        """Wall-clock zone for everything the widget displays"""
        return ZoneInfo(self.app.config.data.get("timezone", DEFAULT_TIMEZONE))

    def now(self) -> datetime:
        return datetime.now(self.timezone)

    @property
    def config_data(self) -> Dict[str, Any]:
        return self.app.config.data

    def _scale(self) -> float:
        width, height = self._get_window_dimensions()
        scale = (width / BASE_WINDOW_WIDTH + height / BASE_WINDOW_HEIGHT) / 2
        # Clamp scale to reasonable bounds (0.5x to 2x)
        return max(0.5, min(2.0, scale))

    def _get_window_dimensions(self) -> tuple:
        """Get current window dimensions (not screen size)"""
        root = getattr(self.app, 'root', None)
        if root is not None and root.winfo_exists():
            root.update_idletasks()
            width = root.winfo_width()
            height = root.winfo_height()
            # Not rendered yet: fall back to screen size
            if width <= 1 or height <= 1:
                width = root.winfo_screenwidth()
                height = root.winfo_screenheight()
            return width, height
        return BASE_WINDOW_WIDTH, BASE_WINDOW_HEIGHT

    def get_responsive_fonts(self) -> dict:
        """Font sizes scaled to the window, with config overrides"""
        scale = self._scale()
        fonts = {
            'display': max(18, int(40 * scale)),
            'title': max(10, int(16 * scale)),
            'heading': max(9, int(14 * scale)),
            'body': max(8, int(12 * scale)),
            'small': max(7, int(10 * scale)),
            'tiny': max(6, int(8 * scale)),
        }
        for key, value in (self.config.get('fonts') or {}).items():
            if key in fonts and isinstance(value, (int, float)):
                fonts[key] = max(6, int(value * scale))
        return fonts

    def get_font_colors(self) -> dict:
        """Font colors from config; white text on the dark background by default"""
        colors = {
            'text': '#ffffff',
            'heading': '#ffffff',
            'title': '#ffffff',
            'muted': '#94a3b8',
            'accent': '#34d399',
            'error': '#f87171',
        }
        colors.update(self.config.get('colors') or {})
        return colors

    def get_responsive_padding(self) -> dict:
        scale = self._scale()
        return {
            'small': max(3, int(5 * scale)),
            'medium': max(5, int(10 * scale)),
            'large': max(8, int(15 * scale)),
        }

    @abstractmethod
    def initialize(self, parent: tk.Frame) -> None:
        """Initialize the component with a parent frame"""
        self.frame = tk.Frame(parent)
        padding = self.get_responsive_padding()['medium']
        self.frame.pack(pady=padding, padx=padding, fill=tk.X)

    def create_container(self) -> tk.Frame:
        """Bordered container with the widget headline"""
        padding = self.get_responsive_padding()
        container = tk.Frame(self.frame, relief=tk.GROOVE, borderwidth=1)
        container.pack(padx=padding['small'], pady=padding['small'], fill=tk.BOTH, expand=True)
        self.create_label(container, text=self.headline, font_size='heading', bold=True).pack(
            anchor='w', padx=padding['medium'], pady=(padding['small'], 0)
        )
        return container

    def create_label(self, parent, text="", font_size=None, bold=False, color=None, **kwargs) -> tk.Label:
        """Create a label with responsive font sizing and configurable colors"""
        fonts = self.get_responsive_fonts()
        colors = self.get_font_colors()

        if font_size is None:
            font_size = 'body'
        size = fonts.get(font_size, fonts['body']) if isinstance(font_size, str) else font_size

        font_family = kwargs.pop('font_family', self.config.get('font_family', 'Arial'))
        font_tuple = (font_family, size, "bold") if bold else (font_family, size)

        if color is None:
            color = colors.get('heading') if bold else colors.get('text')
        else:
            color = colors.get(color, color)
        if 'fg' not in kwargs and 'foreground' not in kwargs:
            kwargs['fg'] = color

        return tk.Label(parent, text=text, font=font_tuple, **kwargs)

    def schedule(self, delay_ms: int, callback) -> Optional[str]:
        """frame.after that tolerates a destroyed frame"""
        if self.frame is None or not self.frame.winfo_exists():
            return None
        return self.frame.after(delay_ms, callback)

    @abstractmethod
    def update(self) -> None:
        """Update component display with latest result"""
        pass

    def handle_background_result(self, result: Any) -> None:
        """Store result and trigger update"""
        self._latest_result = result
        self.update()

    def get_api_data(self) -> Optional[Dict[str, Any]]:
        """JSON-serializable view of what the widget shows, for the API"""
        return None

    def destroy(self) -> None:
        """Clean up resources"""
        try:
            if self.frame is not None and self.frame.winfo_exists():
                self.frame.destroy()
            self.frame = None
            self.logger.debug(f"Component {self.name} destroyed")
        except Exception as e:
            self.logger.error(f"Error destroying component {self.name}: {e}")

    def update_config(self, new_config: Dict[str, Any]) -> None:
        self.config = new_config
        self.logger.info(f"Updated config for {self.name}")
        self._handle_config_update()

    def _handle_config_update(self) -> None:
        """Handle configuration updates"""
        try:
            self.update()
        except Exception as e:
            self.logger.error(f"Error handling config update for {self.name}: {e}", exc_info=True)
