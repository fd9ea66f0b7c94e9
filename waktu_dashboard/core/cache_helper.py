import os
import json
import time
from datetime import datetime
import logging
from typing import Any, Optional
import hashlib

logger = logging.getLogger(__name__)


class CacheHelper:
    """JSON-file key-value store. Each entry records when it was written so readers can apply a TTL."""

    DEFAULT_CACHE_DIR = "~/.waktu_dashboard/cache"

    def __init__(self, cache_dir: Optional[str] = None, component_name: str = ""):
        """Initialize cache helper with specific cache directory
        Args:
            cache_dir: Base cache directory from config, if None uses DEFAULT_CACHE_DIR
            component_name: Component specific subdirectory
        """
        base_dir = os.path.expanduser(cache_dir or self.DEFAULT_CACHE_DIR)
        self.cache_dir = os.path.join(base_dir, component_name) if component_name else base_dir
        os.makedirs(self.cache_dir, exist_ok=True)

    def _get_cache_file(self, key: str) -> str:
        key_hash = hashlib.md5(key.encode()).hexdigest()
        return os.path.join(self.cache_dir, f"{key_hash}.json")

    def get(self, key: str, max_age: Optional[float] = None, now: Optional[float] = None) -> Optional[Any]:
        """Return cached content for key.

        With max_age (seconds) the entry must be younger than that; without it the
        entry must have been written today (local date).
        """
        try:
            cache_file = self._get_cache_file(key)
            if not os.path.exists(cache_file):
                return None

            with open(cache_file, 'r') as f:
                cached = json.load(f)

            now = time.time() if now is None else now
            written_at = float(cached['timestamp'])
            if max_age is not None:
                if now - written_at < max_age:
                    return cached['content']
                return None

            if datetime.fromtimestamp(written_at).date() == datetime.fromtimestamp(now).date():
                return cached['content']
            return None

        except Exception as e:
            logger.error(f"Error reading cache for {key}: {e}")
            return None

    def age(self, key: str, now: Optional[float] = None) -> Optional[float]:
        """Seconds since key was written, or None when absent."""
        try:
            with open(self._get_cache_file(key), 'r') as f:
                cached = json.load(f)
            return (time.time() if now is None else now) - float(cached['timestamp'])
        except FileNotFoundError:
            return None
        except Exception as e:
            logger.error(f"Error reading cache age for {key}: {e}")
            return None

    def set(self, key: str, content: Any, now: Optional[float] = None) -> None:
        """Save JSON-serializable content under key, stamped with the write time."""
        try:
            cache_data = {
                'key': key,
                'timestamp': time.time() if now is None else now,
                'content': content,
            }
            with open(self._get_cache_file(key), 'w') as f:
                json.dump(cache_data, f)

        except Exception as e:
            logger.error(f"Error saving to cache: {e}")

    def remove(self, key: str) -> None:
        try:
            os.remove(self._get_cache_file(key))
        except FileNotFoundError:
            pass
