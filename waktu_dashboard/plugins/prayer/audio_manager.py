import pygame
import threading
import time
import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Any
import os
import json

DEFAULT_AUDIO_FILE = "~/.waktu_dashboard/audio/azan.mp3"


class PlaybackHandle:
    """One azan playback. The completion callback runs exactly once, whatever ends the playback."""

    def __init__(self, identifier: str, on_complete: Optional[Callable[[], None]] = None):
        self.identifier = identifier
        self.error: Optional[BaseException] = None
        self._on_complete = on_complete
        self._done = threading.Event()
        self._lock = threading.Lock()
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def finished(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)

    def complete(self, error: Optional[BaseException] = None) -> bool:
        """Mark finished and fire the callback; False if it had already finished."""
        with self._lock:
            if self._done.is_set():
                return False
            self.error = error
            self._done.set()
        if self._on_complete is not None:
            try:
                self._on_complete()
            except Exception as e:
                self.logger.error(f"Azan completion callback for {self.identifier} failed: {e}", exc_info=True)
        return True


class AzanPlayer:
    """Plays the local azan recording through pygame.mixer; the same file for every prayer."""

    def __init__(self, config: Dict[str, Any]):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.audio_file = Path(os.path.expanduser(config.get('audio_file', DEFAULT_AUDIO_FILE)))
        self.poll_interval = float(config.get('poll_interval', 0.5))
        self.volumes_file = os.path.expanduser(config.get('volumes_file', '~/.waktu_dashboard/azan_volume.json'))
        self.volume = self._load_volume()
        self._mixer_ready = False
        self._current: Optional[PlaybackHandle] = None
        self._lock = threading.RLock()

    def _ensure_mixer(self) -> None:
        if not self._mixer_ready:
            pygame.mixer.init()
            self._mixer_ready = True
        pygame.mixer.music.set_volume(self.volume)

    def _load_volume(self) -> float:
        default = float(self.config.get('volume', 0.8))
        if not self.config.get('save_volume'):
            return default
        try:
            if os.path.exists(self.volumes_file):
                with open(self.volumes_file, 'r') as f:
                    return float(json.load(f).get('volume', default))
        except Exception as e:
            self.logger.error(f"Error loading saved volume: {e}")
        return default

    def _save_volume(self) -> None:
        if not self.config.get('save_volume'):
            return
        try:
            os.makedirs(os.path.dirname(self.volumes_file), exist_ok=True)
            with open(self.volumes_file, 'w') as f:
                json.dump({'volume': self.volume}, f)
        except Exception as e:
            self.logger.error(f"Error saving volume: {e}")

    def get_volume(self) -> float:
        return self.volume

    def set_volume(self, volume: float) -> None:
        self.volume = max(0.0, min(1.0, float(volume)))
        if self._mixer_ready:
            pygame.mixer.music.set_volume(self.volume)
        self._save_volume()

    @property
    def is_playing(self) -> bool:
        return self._current is not None and not self._current.finished

    def play(self, identifier: str, on_complete: Optional[Callable[[], None]] = None) -> PlaybackHandle:
        """Start the azan. on_complete fires once on natural end, on any load/playback error, or on stop()."""
        handle = PlaybackHandle(identifier, on_complete)
        with self._lock:
            self.stop(self._current)
            self._current = handle
            try:
                if not self.audio_file.exists():
                    raise FileNotFoundError(f"Azan audio file not found: {self.audio_file}")
                self._ensure_mixer()
                pygame.mixer.music.load(str(self.audio_file))
                pygame.mixer.music.play()
            except Exception as e:
                self.logger.error(f"Error playing azan for {identifier}: {e}")
                self._current = None
                handle.complete(error=e)
                return handle

        self.logger.info(f"Azan playback started for {identifier}")
        watcher = threading.Thread(target=self._watch, args=(handle,), daemon=True)
        watcher.start()
        return handle

    def _watch(self, handle: PlaybackHandle) -> None:
        """Poll the mixer until the music stops, then complete the handle."""
        while not handle.wait(self.poll_interval):
            try:
                busy = pygame.mixer.music.get_busy()
            except Exception as e:
                self.logger.error(f"Lost audio device during azan: {e}")
                self._finish(handle, error=e)
                return
            if not busy:
                self.logger.info(f"Azan playback finished for {handle.identifier}")
                self._finish(handle)
                return

    def _finish(self, handle: PlaybackHandle, error: Optional[BaseException] = None) -> None:
        with self._lock:
            if self._current is handle:
                self._current = None
        handle.complete(error=error)

    def stop(self, handle: Optional[PlaybackHandle]) -> None:
        """Halt playback now. No-op for None or an already finished handle."""
        if handle is None or handle.finished:
            return
        with self._lock:
            if self._current is handle:
                try:
                    pygame.mixer.music.stop()
                except Exception as e:
                    self.logger.error(f"Error stopping azan: {e}")
                self._current = None
        self.logger.info(f"Azan playback stopped for {handle.identifier}")
        handle.complete()

    def shutdown(self) -> None:
        self.stop(self._current)
        if self._mixer_ready:
            pygame.mixer.quit()
            self._mixer_ready = False
