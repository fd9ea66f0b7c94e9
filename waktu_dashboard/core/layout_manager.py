import tkinter as tk
from typing import List, Dict, Optional
from .component_base import DashboardComponent
import logging


class LayoutManager:
    """Places widgets into a fixed number of columns, by config `column` or into the emptiest one."""

    def __init__(self, root: tk.Tk, container: tk.Frame = None, columns: int = 3, padding: int = 10, bg_color: Optional[str] = None):
        self.root = root
        self.container = container if container else root
        self.columns = columns
        self.padding = padding
        self.bg_color = bg_color
        self.frames: List[tk.Frame] = []
        self.components: Dict[str, DashboardComponent] = {}
        self.logger = logging.getLogger(self.__class__.__name__)
        self._setup_grid()

    def _setup_grid(self) -> None:
        for frame in self.frames:
            if frame.winfo_exists():
                frame.destroy()
        self.frames = []

        if hasattr(self, 'columns_container') and self.columns_container.winfo_exists():
            self.columns_container.destroy()

        self.columns_container = tk.Frame(self.container, bg=self.bg_color)
        self.columns_container.pack(expand=True, fill=tk.BOTH, padx=self.padding, pady=self.padding)

        for _ in range(self.columns):
            frame = tk.Frame(self.columns_container, bg=self.bg_color)
            frame.pack(side=tk.LEFT, expand=True, fill=tk.BOTH, padx=self.padding)
            self.frames.append(frame)

    def _get_target_frame_index(self, component: DashboardComponent) -> int:
        column = component.config.get('column')
        if column is not None:
            return max(0, min(int(column), self.columns - 1))
        return min(range(len(self.frames)), key=lambda i: len(self.frames[i].winfo_children()))

    def add_component(self, component: DashboardComponent) -> None:
        try:
            self.components[component.name] = component
            target_frame = self.frames[self._get_target_frame_index(component)]
            component.initialize(target_frame)
            component.frame.pack(fill=tk.BOTH, expand=True, pady=(0, self.padding))
            self.logger.debug(f"Added {component.name} to layout")
        except Exception as e:
            self.logger.error(f"Error adding component {component.name}: {e}", exc_info=True)

    def update_layout(self, columns: int, padding: int) -> None:
        # Widgets own timers and audio; moving them between columns needs a restart.
        if columns != self.columns or padding != self.padding:
            self.logger.warning(
                f"Layout changed to {columns} columns / padding {padding}; restart to apply"
            )
