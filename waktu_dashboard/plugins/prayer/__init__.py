def register_components(plugin_manager):
    """Register the prayer times widget"""
    from .prayer_component import PrayerTimesComponent
    plugin_manager.register_component(PrayerTimesComponent)
