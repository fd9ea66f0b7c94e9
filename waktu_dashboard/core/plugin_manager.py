import importlib
import pkgutil
from typing import Dict, Type, Any, Optional
import logging


class PluginManager:
    def __init__(self):
        self.components: Dict[str, Type] = {}
        self.logger = logging.getLogger(__name__)

    def discover_plugins(self, plugin_package: str = "waktu_dashboard.plugins") -> None:
        """Import every plugin package and let it register its widget classes"""
        package = importlib.import_module(plugin_package)
        self.logger.info(f"Discovering plugins in package: {plugin_package}")

        for _, name, is_pkg in pkgutil.iter_modules(package.__path__):
            if not is_pkg:
                continue
            try:
                module = importlib.import_module(f"{plugin_package}.{name}")
                if hasattr(module, "register_components"):
                    module.register_components(self)
                    self.logger.info(f"Registered components from plugin: {name}")
            except Exception as e:
                self.logger.error(f"Error loading plugin {name}: {e}")
                self.logger.exception(e)

    def register_component(self, component_class: Type) -> None:
        self.logger.debug(f"Registering component: {component_class.name}")
        self.components[component_class.name] = component_class

    def create_component(self, app, name: str, config: Optional[Dict[str, Any]]) -> Optional[Any]:
        """Create an instance of a registered component if it's enabled in config"""
        if name not in self.components:
            self.logger.warning(f"Component '{name}' not found")
            return None

        if not config or not config.get("enable", False):
            self.logger.info(f"Component '{name}' disabled")
            return None

        self.logger.debug(f"Creating component {name} with config: {config}")
        return self.components[name](app, config)
