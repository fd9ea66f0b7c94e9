import yaml
from pathlib import Path
import os
from typing import Any, Dict, Optional, List, Callable
import logging
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler, FileModifiedEvent
import time
import re

DEFAULT_TIMEZONE = "Asia/Kuala_Lumpur"
DEFAULT_ZONE = "WLY01"

ENV_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
ENV_REFERENCE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
ENV_LINE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")


class ConfigChangeHandler(FileSystemEventHandler):
    """Reloads the config when its file is modified, at most once per cooldown."""

    def __init__(self, config, cooldown: float = 1.0):
        self.config = config
        self.cooldown = cooldown
        self.last_reload = 0.0

    def on_modified(self, event):
        if not isinstance(event, FileModifiedEvent) or Path(event.src_path) != self.config.config_file:
            return
        now = time.time()
        if now - self.last_reload < self.cooldown:
            return
        self.last_reload = now
        try:
            self.config.reload()
        except Exception as e:
            logging.error(f"Error handling config change: {e}")


def default_config(config_dir: Path) -> Dict[str, Any]:
    """Configuration written on first run."""
    return {
        "window": {
            "fullscreen": False,
            "borderless": False,
            "width": 1280,
            "height": 800,
            "auto_size": True,
            "margin_percent": 5,
            "background_color": "#0f172a",
        },
        "layout": {
            "columns": 3,
            "padding": 10,
        },
        "timezone": DEFAULT_TIMEZONE,
        "update_interval": 1000,  # milliseconds
        "logging": {
            "level": "INFO",
            "file": str(config_dir / "dashboard.log"),
        },
        "database": {
            "path": "~/.waktu_dashboard/dashboard.db",
        },
        "cache": {
            "directory": "~/.waktu_dashboard/cache",
        },
        "api": {
            "enabled": False,
            "host": "127.0.0.1",
            "port": 8765,
        },
        "components": {
            "Clock": {"enable": True, "column": 0},
            "Prayer Times": {
                "enable": True,
                "column": 0,
                "zone": DEFAULT_ZONE,
                "enable_azan": True,
                "audio_file": "~/.waktu_dashboard/audio/azan.mp3",
                "volume": 0.8,
            },
            "Zones": {"enable": True, "column": 0},
            "Weather": {"enable": True, "column": 1},
            "Hijri Calendar": {"enable": True, "column": 1},
            "Qibla": {"enable": True, "column": 1, "lat": 3.139, "lon": 101.6869},
            "Daily Verse": {"enable": True, "column": 2},
            "Hadith": {"enable": True, "column": 2},
        },
    }


class Config:
    def __init__(self, root: Optional[Any] = None, config_path: Optional[str] = None, watch: bool = True):
        logging.debug("Initializing Config class")

        self.root = root
        self.change_callbacks: List[Callable] = []
        self._loading = False  # guards against recursive reloads
        self.observer = None

        if config_path:
            self.config_file = Path(config_path).expanduser().resolve()
            self.config_dir = self.config_file.parent
        else:
            self.config_dir = Path.home() / ".waktu_dashboard"
            self.config_file = self.config_dir / "config.yaml"

        logging.debug(f"Using config file: {self.config_file}")

        self._load_env_file()
        self._ensure_config_exists()
        self._load_config()

        if watch:
            self.observer = Observer()
            logging.info(f"Path monitored for reloading: {self.config_dir}")
            self.observer.schedule(ConfigChangeHandler(self), str(self.config_dir), recursive=False)
            self.observer.start()

    def register_change_callback(self, callback: Callable) -> None:
        """Register a callback to be called with the new data when config changes"""
        self.change_callbacks.append(callback)

    def reload(self) -> None:
        """Reload config and notify listeners"""
        if self._loading:
            return

        self._loading = True
        try:
            logging.info("Config file change detected - reloading configuration")

            # Wait briefly for file to be fully written
            time.sleep(0.1)

            old_config = self.data.copy() if hasattr(self, 'data') else {}
            self._load_config()
            self._log_config_changes(old_config, self.data)

            for callback in self.change_callbacks:
                try:
                    if self.root:
                        self.root.after_idle(lambda cb=callback: cb(self.data))
                    else:
                        callback(self.data)
                except Exception as e:
                    logging.error(f"Error in config change callback: {e}")

        except Exception as e:
            logging.error(f"Error reloading config: {e}")
            logging.exception(e)
        finally:
            self._loading = False

    def _log_config_changes(self, old_config: Dict, new_config: Dict) -> None:
        def compare_dict(path: str, dict1: Dict, dict2: Dict) -> None:
            for key in set(dict1.keys()) | set(dict2.keys()):
                current_path = f"{path}.{key}" if path else key
                if key in dict1 and key in dict2:
                    if isinstance(dict1[key], dict) and isinstance(dict2[key], dict):
                        compare_dict(current_path, dict1[key], dict2[key])
                    elif dict1[key] != dict2[key]:
                        logging.info(f"Config changed: {current_path}: {dict1[key]} -> {dict2[key]}")
                elif key in dict1:
                    logging.info(f"Config removed: {current_path}: {dict1[key]}")
                else:
                    logging.info(f"Config added: {current_path}: {dict2[key]}")

        compare_dict("", old_config, new_config)

    def cleanup(self) -> None:
        """Stop the file observer"""
        if self.observer is not None:
            self.observer.stop()
            self.observer.join()

    def _ensure_config_exists(self) -> None:
        """Create default config if it doesn't exist"""
        if not self.config_dir.exists():
            logging.info(f"Creating config directory: {self.config_dir}")
            self.config_dir.mkdir(parents=True)

        if not self.config_file.exists():
            logging.info(f"Creating default config file: {self.config_file}")
            self.config_file.write_text(yaml.dump(default_config(self.config_dir), sort_keys=False))

    def _load_env_file(self) -> None:
        """Load environment variables from a .env file next to the config or in the cwd"""
        candidates = [
            self.config_dir / ".env",
            Path.cwd() / ".env",
        ]
        env_file = next((path for path in candidates if path.exists()), None)
        if not env_file:
            logging.debug("No .env file found, skipping environment variable loading")
            return

        logging.info(f"Loading environment variables from: {env_file}")
        try:
            lines = env_file.read_text().splitlines()
        except OSError as e:
            logging.warning(f"Error loading .env file: {e}")
            return
        # Variables already set in the environment win
        for match in filter(None, (ENV_LINE.match(line.strip()) for line in lines)):
            key, value = match.groups()
            os.environ.setdefault(key, value.strip('"').strip("'"))

    def _substitute_env_vars(self, data: Any) -> Any:
        """Expand ${VAR} inside strings and a bare $VAR value; unknown names are left as written"""
        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}
        if isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]
        if not isinstance(data, str):
            return data
        if data.startswith('$') and ENV_NAME.fullmatch(data[1:]):
            return os.environ.get(data[1:], data)
        return ENV_REFERENCE.sub(lambda m: os.environ.get(m.group(1), m.group(0)), data)

    def _load_config(self) -> None:
        """Load configuration from file"""
        try:
            with open(self.config_file) as f:
                new_data = yaml.safe_load(f)

            if not isinstance(new_data, dict):
                raise ValueError("Invalid config format: root must be a dictionary")

            self.data = self._substitute_env_vars(new_data)
            self.data.setdefault("timezone", DEFAULT_TIMEZONE)
            self.data.setdefault("components", {})

            if "logging" in self.data and "file" in self.data["logging"]:
                self.data["logging"]["file"] = os.path.expanduser(self.data["logging"]["file"])

        except Exception as e:
            logging.error(f"Error loading config: {e}")
            if hasattr(self, 'data'):
                logging.info("Keeping previous configuration")
            else:
                logging.info("Using default configuration")
                self.data = default_config(self.config_dir)

    def get_component_config(self, component_name: str) -> Optional[Dict[str, Any]]:
        return self.data.get("components", {}).get(component_name)

    def save_component_config(self, component_name: str, config: Dict[str, Any]) -> None:
        """Persist one widget's configuration back to the YAML file"""
        self.data.setdefault("components", {})[component_name] = config
        with open(self.config_file, "w") as f:
            yaml.dump(self.data, f, sort_keys=False)
