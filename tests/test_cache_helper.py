import time
from datetime import datetime

from waktu_dashboard.core.cache_helper import CacheHelper


def test_max_age(tmp_path):
    cache = CacheHelper(str(tmp_path), "test")
    cache.set("key", {"value": 1}, now=1000)

    assert cache.get("key", max_age=100, now=1050) == {"value": 1}
    assert cache.get("key", max_age=100, now=1100) is None
    assert cache.age("key", now=1030) == 30


def test_without_max_age_entry_lasts_the_day(tmp_path):
    cache = CacheHelper(str(tmp_path), "test")
    written = datetime(2024, 7, 8, 9).timestamp()
    cache.set("key", [1, 2], now=written)

    assert cache.get("key", now=datetime(2024, 7, 8, 23, 59).timestamp()) == [1, 2]
    assert cache.get("key", now=datetime(2024, 7, 9, 0, 1).timestamp()) is None


def test_missing_and_removed(tmp_path):
    cache = CacheHelper(str(tmp_path))
    assert cache.get("nothing") is None
    assert cache.age("nothing") is None

    cache.set("key", "value")
    assert cache.get("key", max_age=60) == "value"
    cache.remove("key")
    cache.remove("key")
    assert cache.get("key", max_age=60) is None


def test_corrupt_file_reads_as_missing(tmp_path):
    cache = CacheHelper(str(tmp_path))
    cache.set("key", "value", now=time.time())
    with open(cache._get_cache_file("key"), "w") as f:
        f.write("{not json")
    assert cache.get("key", max_age=60) is None
