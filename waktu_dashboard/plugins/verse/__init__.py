def register_components(plugin_manager):
    from .verse_component import DailyVerseComponent
    plugin_manager.register_component(DailyVerseComponent)
