def register_components(plugin_manager):
    """Register the hourly hadith widget"""
    from .hadith_component import HadithComponent
    plugin_manager.register_component(HadithComponent)
