def register_components(plugin_manager):
    from .clock_component import ClockComponent
    plugin_manager.register_component(ClockComponent)
