import tkinter as tk
import tkinter.messagebox as messagebox
from typing import Dict, Any, List, Optional
import logging
import sys

from .task_manager import TaskManager
from .component_base import DashboardComponent
from .plugin_manager import PluginManager
from .config import Config
from .layout_manager import LayoutManager


class DashboardApp:
    def __init__(self, config_path: Optional[str] = None):
        self.root = tk.Tk()
        self.logger = logging.getLogger(self.__class__.__name__)

        self.config = Config(root=self.root, config_path=config_path)
        self.config.register_change_callback(self.handle_config_change)

        self._setup_logging()
        self._configure_window()

        bg_color = self.config.data.get("window", {}).get("background_color")
        if bg_color:
            self.root.configure(bg=bg_color)
            self.root.option_add('*background', bg_color)
            self.root.option_add('*Background', bg_color)

        self.main_container = tk.Frame(self.root, bg=bg_color)
        self.main_container.pack(fill=tk.BOTH, expand=True)

        # Tables must exist before widgets read their last saved records
        from .db import init_db
        init_db(self.config.data)

        self.plugin_manager = PluginManager()
        self.task_manager = TaskManager()

        layout = self.config.data.get("layout", {})
        self.layout_manager = LayoutManager(
            self.root,
            container=self.main_container,
            columns=layout.get("columns", 3),
            padding=layout.get("padding", 10),
            bg_color=bg_color,
        )

        self.components: List[DashboardComponent] = []
        self.initialize_components()

        from .models import sync_components_from_config
        sync_components_from_config(self.config.data)

        try:
            from waktu_dashboard.api import run_api_server
            run_api_server(self)
        except Exception as e:
            self.logger.warning(f"API server not started: {e}")

    def _setup_logging(self):
        """Configure logging to write to both file and stdout"""
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
        logging_config = self.config.data.get("logging", {})
        root_logger.setLevel(getattr(logging, str(logging_config.get("level", "INFO")).upper(), logging.INFO))

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
        )

        log_file = logging_config.get("file")
        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        logging.info("Waktu Solat dashboard starting...")

    def _configure_window(self) -> None:
        """Configure window size and kiosk behaviour"""
        window_config = self.config.data.get("window", {})
        self.root.title("Waktu Solat")

        if window_config.get("borderless"):
            self.root.overrideredirect(True)
            self.root.attributes('-topmost', True)

        if window_config.get("auto_size", True):
            screen_width = self.root.winfo_screenwidth()
            screen_height = self.root.winfo_screenheight()
            margin = int(min(screen_width, screen_height) * window_config.get("margin_percent", 5) / 100)
            width = screen_width - (2 * margin)
            height = screen_height - (2 * margin)
            self.root.geometry(f"{width}x{height}+{margin}+{margin}")
        else:
            self.root.geometry(f"{window_config.get('width', 1280)}x{window_config.get('height', 800)}")

        self.root.attributes('-fullscreen', bool(window_config.get("fullscreen")))

        # Kiosk toggle
        self.root.bind('<F11>', lambda e: self.toggle_fullscreen())
        self.root.bind('<Escape>', lambda e: self.exit_fullscreen())

    def toggle_fullscreen(self) -> None:
        current = bool(self.root.attributes('-fullscreen'))
        self.root.attributes('-fullscreen', not current)
        self.logger.info(f"Fullscreen {'off' if current else 'on'}")

    def exit_fullscreen(self) -> None:
        if self.root.attributes('-fullscreen'):
            self.root.attributes('-fullscreen', False)
        elif self.config.data.get("window", {}).get("borderless"):
            self.root.quit()

    def initialize_components(self):
        try:
            self.plugin_manager.discover_plugins()

            for component_name in self.plugin_manager.components:
                component_config = self.config.get_component_config(component_name)
                component = self.plugin_manager.create_component(self, component_name, component_config)
                if component:
                    self.layout_manager.add_component(component)
                    self.components.append(component)
                    logging.debug(f"Component {component_name} initialized successfully")
                else:
                    logging.debug(f"Skipping disabled component: {component_name}")

        except Exception as e:
            logging.error(f"Error initializing components: {e}")
            messagebox.showerror("Error", f"Failed to initialize components: {e}")
            logging.exception(e)

    def get_component(self, name: str) -> Optional[DashboardComponent]:
        return next((c for c in self.components if c.name == name), None)

    def handle_config_change(self, new_config: Dict[str, Any]) -> None:
        """Push reloaded config into the layout and each widget"""
        self.logger.info("Handling config change")
        try:
            layout = new_config.get("layout", {})
            self.layout_manager.update_layout(
                columns=layout.get("columns", self.layout_manager.columns),
                padding=layout.get("padding", self.layout_manager.padding),
            )
            for component in self.components:
                component_config = new_config.get('components', {}).get(component.name)
                if component_config is not None:
                    component.update_config(dict(component_config))
        except Exception as e:
            self.logger.error(f"Error handling config change: {e}", exc_info=True)

    def _drain_result_queue(self) -> None:
        """Hand background task results to their widgets (main thread)."""
        try:
            while not self.task_manager.result_queue.empty():
                task_name, result = self.task_manager.result_queue.get_nowait()
                logging.debug(f"Processing task result for {task_name}")
                component = self.get_component(task_name)
                if component is not None:
                    component.handle_background_result(result)
        except Exception as e:
            logging.error(f"Error draining result queue: {e}", exc_info=True)
        self.root.after(1000, self._drain_result_queue)

    def run(self):
        try:
            self.root.after(1000, self._drain_result_queue)
            self.root.mainloop()
        finally:
            for component in self.components:
                component.destroy()
            self.task_manager.stop()
            self.config.cleanup()
