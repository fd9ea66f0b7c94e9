from datetime import date
from unittest.mock import MagicMock, patch

import pytest
import requests

from waktu_dashboard.plugins.verse.quran_service import (
    DAILY_VERSES,
    QuranApiError,
    QuranService,
    format_verse_reference,
    select_daily_verse,
)

VERSE = {
    "surahName": "Al-Baqarah",
    "surahNo": 2,
    "ayahNo": 255,
    "english": "Allah - there is no deity except Him, the Ever-Living, the Sustainer of existence.",
    "arabic1": "اللَّهُ لَا إِلَٰهَ إِلَّا هُوَ الْحَيُّ الْقَيُّومُ",
}


def test_daily_verse_selection():
    assert len(DAILY_VERSES) == 46
    assert select_daily_verse(date(2024, 7, 1)) == DAILY_VERSES[1]
    assert select_daily_verse(date(2024, 7, 31)) == (65, 3)
    assert select_daily_verse(date(2024, 8, 1)) == select_daily_verse(date(2024, 7, 1))


def test_format_reference():
    assert format_verse_reference(VERSE) == "Al-Baqarah 2:255"


@patch("waktu_dashboard.plugins.verse.quran_service.requests.get")
def test_daily_verse_is_cached(mock_get, tmp_path):
    mock_get.return_value = MagicMock(ok=True, **{"json.return_value": VERSE})
    service = QuranService({"cache_dir": str(tmp_path)})

    assert service.get_daily_verse(date(2024, 7, 3)) == VERSE
    assert service.get_daily_verse(date(2024, 7, 3)) == VERSE
    assert mock_get.call_count == 1
    surah, ayah = DAILY_VERSES[3]
    assert mock_get.call_args[0][0] == f"https://quranapi.pages.dev/api/{surah}/{ayah}.json"


@patch("waktu_dashboard.plugins.verse.quran_service.requests.get")
def test_cached_verse_from_yesterday_is_refetched(mock_get, tmp_path):
    mock_get.return_value = MagicMock(ok=True, **{"json.return_value": VERSE})
    service = QuranService({"cache_dir": str(tmp_path)})
    service.get_daily_verse(date(2024, 7, 3))
    service.get_daily_verse(date(2024, 7, 4))
    assert mock_get.call_count == 2


@patch("waktu_dashboard.plugins.verse.quran_service.requests.get")
def test_missing_surah_name_raises(mock_get, tmp_path):
    mock_get.return_value = MagicMock(ok=True, **{"json.return_value": {"english": "..."}})
    with pytest.raises(QuranApiError):
        QuranService({"cache_dir": str(tmp_path)}).get_daily_verse(date(2024, 7, 3))


@patch("waktu_dashboard.plugins.verse.quran_service.requests.get")
def test_unreachable_api_raises(mock_get, tmp_path):
    mock_get.side_effect = requests.exceptions.ConnectionError("offline")
    with pytest.raises(QuranApiError):
        QuranService({"cache_dir": str(tmp_path)}).fetch_verse(1, 1)
