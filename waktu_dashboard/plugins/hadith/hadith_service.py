"""
Hourly hadith rotation: 24 hadiths are drawn for each day and the hour of day picks one.
"""
import logging
import random
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from waktu_dashboard.core.cache_helper import CacheHelper

HADITHS_FILE = Path(__file__).parent / "hadiths.yaml"
HADITH_CACHE_KEY = "hadith-daily-collection"
DAILY_COLLECTION_SIZE = 24


@dataclass(frozen=True)
class Hadith:
    arabic: str
    malay: str
    source: str
    reference: str

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


def load_hadiths(path: Optional[Path] = None) -> List[Hadith]:
    with open(path or HADITHS_FILE) as f:
        return [Hadith(**entry) for entry in yaml.safe_load(f)]


class HadithService:
    def __init__(self, cache_dir: Optional[str] = None, hadiths: Optional[List[Hadith]] = None,
                 rng: Optional[random.Random] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.cache_helper = CacheHelper(cache_dir, "hadith")
        self.hadiths = hadiths if hadiths is not None else load_hadiths()
        self.rng = rng or random.Random()

    def _new_collection(self, day: str) -> Dict[str, Any]:
        selected = self.rng.sample(self.hadiths, min(DAILY_COLLECTION_SIZE, len(self.hadiths)))
        collection = {"date": day, "hadiths": [hadith.as_dict() for hadith in selected]}
        self.cache_helper.set(HADITH_CACHE_KEY, collection)
        self.logger.info(f"Created new hadith collection: {len(selected)} hadiths for {day}")
        return collection

    def get_daily_collection(self, now: datetime) -> List[Hadith]:
        """Today's collection, drawn once per local date and kept in the cache."""
        day = now.date().isoformat()
        collection = self.cache_helper.get(HADITH_CACHE_KEY, max_age=float("inf"))
        if not collection or collection.get("date") != day or not collection.get("hadiths"):
            collection = self._new_collection(day)
        return [Hadith(**entry) for entry in collection["hadiths"]]

    def get_hourly_hadith(self, now: datetime) -> Dict[str, Any]:
        """{"hadith", "hour", "index", "total"}; the hour of now selects from today's collection."""
        collection = self.get_daily_collection(now)
        index = now.hour % len(collection)
        self.logger.debug(f"Hour {now.hour} -> hadith #{index + 1} of {len(collection)}")
        return {"hadith": collection[index], "hour": now.hour, "index": index, "total": len(collection)}

    def reset_collection(self) -> None:
        self.cache_helper.remove(HADITH_CACHE_KEY)
        self.logger.info("Hadith collection reset")
