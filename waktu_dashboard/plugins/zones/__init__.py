def register_components(plugin_manager):
    """Register the zone selector widget"""
    from .zone_component import ZoneSelectorComponent
    plugin_manager.register_component(ZoneSelectorComponent)
