def register_components(plugin_manager):
    from .hijri_component import HijriCalendarComponent
    plugin_manager.register_component(HijriCalendarComponent)
