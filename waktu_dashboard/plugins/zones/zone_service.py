"""
JAKIM e-Solat zone table and availability checks against the prayer time API.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import requests
import yaml

from waktu_dashboard.core.cache_helper import CacheHelper
from waktu_dashboard.plugins.prayer.prayer_base import DEFAULT_API_BASE

ZONES_FILE = Path(__file__).parent / "zones.yaml"
WORKING_ZONES_CACHE_KEY = "waktu-solat-working-zones"
DEFAULT_BATCH_SIZE = 10
DEFAULT_CACHE_TTL = 6 * 3600

logger = logging.getLogger(__name__)

_zones: Optional[List["Zone"]] = None


class ZoneLookupError(Exception):
    """Coordinates could not be resolved to a zone."""


@dataclass(frozen=True)
class Zone:
    code: str
    name: str
    state: str

    @property
    def label(self) -> str:
        return f"{self.code} - {self.name} ({self.state})"

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


def load_zones(path: Optional[Path] = None) -> List[Zone]:
    """All zones in file order. The default file is read once."""
    global _zones
    if path is None and _zones is not None:
        return list(_zones)

    with open(path or ZONES_FILE) as f:
        data = yaml.safe_load(f)
    zones = [
        Zone(code=str(code), name=str(name), state=str(state))
        for state, areas in data.items()
        for code, name in areas.items()
    ]
    if path is None:
        _zones = zones
    return list(zones)


def find_zone(code: str) -> Optional[Zone]:
    code = code.upper()
    return next((zone for zone in load_zones() if zone.code == code), None)


class ZoneChecker:
    """Probes every zone for a usable prayer table and caches the working ones."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        zones: Optional[List[Zone]] = None,
        probe: Optional[Callable[[Zone], bool]] = None,
    ):
        self.config = config or {}
        self.logger = logging.getLogger(self.__class__.__name__)
        self.zones = zones if zones is not None else load_zones()
        self.probe = probe or self.check_zone
        self.batch_size = max(1, int(self.config.get('batch_size', DEFAULT_BATCH_SIZE)))
        self.cache_ttl = float(self.config.get('cache_ttl', DEFAULT_CACHE_TTL))
        self.timeout = self.config.get('timeout', 15)
        self.cache_helper = CacheHelper(self.config.get('cache_dir'), "zones")

    @property
    def api_base(self) -> str:
        return str(self.config.get('api_base', DEFAULT_API_BASE)).rstrip('/')

    def check_zone(self, zone: Zone) -> bool:
        """True when the API returns a non-empty prayer table for the zone."""
        try:
            response = requests.get(f"{self.api_base}/v2/solat/{zone.code}", timeout=self.timeout)
            if not response.ok:
                self.logger.info(f"Zone {zone.code} ({zone.name}): HTTP {response.status_code}")
                return False
            prayers = response.json().get('prayers')
            if not isinstance(prayers, list) or not prayers:
                self.logger.info(f"Zone {zone.code} ({zone.name}): no prayer data")
                return False
            self.logger.debug(f"Zone {zone.code} ({zone.name}): working")
            return True
        except (requests.exceptions.RequestException, ValueError, AttributeError) as e:
            self.logger.info(f"Zone {zone.code} ({zone.name}): {e}")
            return False

    def _probe(self, zone: Zone) -> bool:
        try:
            return bool(self.probe(zone))
        except Exception as e:
            self.logger.error(f"Zone probe for {zone.code} failed: {e}")
            return False

    def probe_zones(self) -> List[Zone]:
        """Probe in batches of batch_size; a batch must finish before the next one starts."""
        working = []
        for start in range(0, len(self.zones), self.batch_size):
            batch = self.zones[start:start + self.batch_size]
            with ThreadPoolExecutor(max_workers=self.batch_size) as executor:
                results = list(executor.map(self._probe, batch))
            working.extend(zone for zone, ok in zip(batch, results) if ok)
        self.logger.info(f"Found {len(working)} working zones out of {len(self.zones)}")
        return working

    def get_working_zones(self, force: bool = False) -> List[Zone]:
        """Working zones, from cache when younger than cache_ttl unless force.

        When no zone answers (network down) the full zone list is returned and
        nothing is cached.
        """
        if not force:
            cached = self.cache_helper.get(WORKING_ZONES_CACHE_KEY, max_age=self.cache_ttl)
            if cached:
                self.logger.debug(f"Using cached zones ({len(cached)} zones)")
                return [Zone(**zone) for zone in cached]

        working = self.probe_zones()
        if not working:
            self.logger.warning("No zone answered; keeping the full zone list")
            return list(self.zones)

        self.cache_helper.set(WORKING_ZONES_CACHE_KEY, [zone.as_dict() for zone in working])
        return working

    def get_zone_by_coordinates(self, lat: float, lon: float) -> str:
        """Zone code covering (lat, lon), via the provider's lookup endpoint."""
        url = f"{self.api_base}/zones/{lat}/{lon}"
        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ZoneLookupError(f"Could not reach zone lookup: {e}") from e
        if not response.ok:
            raise ZoneLookupError(f"API returned {response.status_code}")
        try:
            zone = response.json().get('zone')
        except (ValueError, AttributeError) as e:
            raise ZoneLookupError("Zone lookup returned invalid JSON") from e
        if not zone:
            raise ZoneLookupError(f"No zone found for {lat}, {lon}")
        self.logger.info(f"Coordinates {lat}, {lon} are in zone {zone}")
        return str(zone).upper()
