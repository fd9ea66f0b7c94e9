def register_components(plugin_manager):
    from .qibla_component import QiblaComponent
    plugin_manager.register_component(QiblaComponent)
