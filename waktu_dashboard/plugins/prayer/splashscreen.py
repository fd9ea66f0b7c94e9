import tkinter as tk
import logging
from typing import Callable, Optional

from .prayer_set import PRAYER_LOCAL_NAMES, PRAYER_NAMES


class PrayerSplashscreen:
    """Full-screen notice shown while the azan plays. Clicking anywhere stops the azan."""

    def __init__(self, root: tk.Misc, on_click: Optional[Callable[[], None]] = None, colors: Optional[dict] = None):
        self.root = root
        self.on_click = on_click
        self.colors = {
            'background': '#064e3b',
            'text': '#ffffff',
            'accent': '#6ee7b7',
        }
        self.colors.update(colors or {})
        self.window: Optional[tk.Toplevel] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def visible(self) -> bool:
        return self.window is not None and bool(self.window.winfo_exists())

    def show(self, prayer_key: str) -> None:
        self.hide()
        bg = self.colors['background']
        window = tk.Toplevel(self.root, bg=bg)
        window.overrideredirect(True)
        window.attributes('-topmost', True)
        width, height = self.root.winfo_screenwidth(), self.root.winfo_screenheight()
        window.geometry(f"{width}x{height}+0+0")

        scale = max(0.5, min(2.0, height / 600))
        body = tk.Frame(window, bg=bg)
        body.place(relx=0.5, rely=0.5, anchor='center')

        tk.Label(body, text="Prayer Time has arrived", bg=bg, fg=self.colors['accent'],
                 font=("Arial", int(24 * scale))).pack(pady=(0, int(10 * scale)))
        tk.Label(body, text=PRAYER_NAMES.get(prayer_key, prayer_key), bg=bg, fg=self.colors['text'],
                 font=("Arial", int(64 * scale), "bold")).pack()
        tk.Label(body, text=PRAYER_LOCAL_NAMES.get(prayer_key, ""), bg=bg, fg=self.colors['text'],
                 font=("Arial", int(28 * scale))).pack()
        tk.Label(body, text="Tap anywhere to stop the azan", bg=bg, fg=self.colors['accent'],
                 font=("Arial", int(12 * scale))).pack(pady=(int(30 * scale), 0))

        for widget in (window, body, *body.winfo_children()):
            widget.bind('<Button-1>', self._clicked)

        self.window = window
        self.logger.info(f"Splashscreen shown for {prayer_key}")

    def _clicked(self, _event=None) -> None:
        if self.on_click is not None:
            self.on_click()
        else:
            self.hide()

    def hide(self) -> None:
        if self.window is not None:
            if self.window.winfo_exists():
                self.window.destroy()
            self.window = None
            self.logger.debug("Splashscreen hidden")
