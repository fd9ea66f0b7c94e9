from typing import Tuple

# (start hour, end hour, greeting, quote); anything outside is night
GREETINGS = (
    (5, 6, "وقت النجاة - Dawn Time", "The best time for tahajud prayer"),
    (6, 12, "صباح الخير - Good Morning", "Start your day with prayer and gratitude"),
    (12, 15, "السلام عليكم - Good Afternoon", "Remember Allah in moments of ease"),
    (15, 18, "مساء الخير - Good Afternoon", "Asr time has approached, remember your prayer"),
    (18, 19, "مساء الخير - Good Evening", "Maghrib time - break your fast with gratitude"),
    (19, 22, "مساء الخير - Good Evening", "Isha time - end your day with prayer"),
)
NIGHT_GREETING = ("تصبح الله - Good Night", "Rest well, ready for Fajr prayer")


def get_islamic_greeting(hour: int) -> Tuple[str, str]:
    """(greeting, quote) for an hour of the day, 0-23"""
    for start, end, greeting, quote in GREETINGS:
        if start <= hour < end:
            return greeting, quote
    return NIGHT_GREETING
