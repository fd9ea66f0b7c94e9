from unittest.mock import MagicMock, patch

import pytest

from waktu_dashboard.plugins.prayer.audio_manager import AzanPlayer


@pytest.fixture
def pygame():
    with patch("waktu_dashboard.plugins.prayer.audio_manager.pygame") as mock_pygame:
        yield mock_pygame


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "azan.mp3"
    path.write_bytes(b"ID3")
    return path


def test_missing_file_completes_once(pygame, tmp_path):
    player = AzanPlayer({"audio_file": str(tmp_path / "missing.mp3")})
    on_complete = MagicMock()

    handle = player.play("fajr", on_complete)

    assert handle.finished
    assert isinstance(handle.error, FileNotFoundError)
    on_complete.assert_called_once_with()
    pygame.mixer.music.play.assert_not_called()
    assert not player.is_playing


def test_natural_end_completes_once(pygame, audio_file):
    pygame.mixer.music.get_busy.return_value = False
    player = AzanPlayer({"audio_file": str(audio_file), "poll_interval": 0.01})
    on_complete = MagicMock()

    handle = player.play("dhuhr", on_complete)

    assert handle.wait(2)
    on_complete.assert_called_once_with()
    pygame.mixer.music.load.assert_called_once_with(str(audio_file))
    assert handle.error is None


def test_stop_completes_once(pygame, audio_file):
    pygame.mixer.music.get_busy.return_value = True
    player = AzanPlayer({"audio_file": str(audio_file), "poll_interval": 0.01})
    on_complete = MagicMock()

    handle = player.play("asr", on_complete)
    assert player.is_playing
    player.stop(handle)
    player.stop(handle)

    assert handle.finished
    on_complete.assert_called_once_with()
    pygame.mixer.music.stop.assert_called_once_with()


def test_stop_none_is_noop(pygame):
    player = AzanPlayer({})
    player.stop(None)
    pygame.mixer.music.stop.assert_not_called()


def test_lost_device_completes_with_error(pygame, audio_file):
    pygame.mixer.music.get_busy.side_effect = RuntimeError("device gone")
    player = AzanPlayer({"audio_file": str(audio_file), "poll_interval": 0.01})
    on_complete = MagicMock()

    handle = player.play("isha", on_complete)

    assert handle.wait(2)
    on_complete.assert_called_once_with()
    assert isinstance(handle.error, RuntimeError)


def test_new_playback_stops_previous(pygame, audio_file):
    pygame.mixer.music.get_busy.return_value = True
    player = AzanPlayer({"audio_file": str(audio_file), "poll_interval": 0.01})
    first_done = MagicMock()

    first = player.play("maghrib", first_done)
    second = player.play("isha", MagicMock())

    assert first.finished
    first_done.assert_called_once_with()
    assert not second.finished
    player.stop(second)


def test_callback_error_is_contained(pygame, tmp_path):
    player = AzanPlayer({"audio_file": str(tmp_path / "missing.mp3")})
    handle = player.play("fajr", MagicMock(side_effect=RuntimeError("boom")))
    assert handle.finished


def test_volume_is_clamped(pygame):
    player = AzanPlayer({"volume": 0.5})
    assert player.get_volume() == 0.5
    player.set_volume(3)
    assert player.get_volume() == 1.0
