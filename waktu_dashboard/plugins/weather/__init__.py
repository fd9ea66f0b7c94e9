def register_components(plugin_manager):
    from .weather_component import WeatherComponent
    plugin_manager.register_component(WeatherComponent)
