"""
Qibla direction: great-circle bearing and haversine distance to the Ka'bah.
"""
import math
from dataclasses import dataclass, asdict
from typing import Any, Dict

KABAH_LAT = 21.4225
KABAH_LON = 39.8262
EARTH_RADIUS_KM = 6371
CARDINALS = ('N', 'NE', 'E', 'SE', 'S', 'SW', 'W', 'NW')


@dataclass(frozen=True)
class QiblaDirection:
    bearing: float  # degrees clockwise from true north, [0, 360)
    cardinal: str
    distance: float  # km

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Initial forward azimuth from point 1 to point 2, normalised to [0, 360)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    delta_lambda = math.radians(lon2 - lon1)
    y = math.sin(delta_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in km."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)
    a = (math.sin(delta_phi / 2) ** 2
         + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def get_cardinal_direction(bearing: float) -> str:
    return CARDINALS[_round_half_up(bearing / 45) % 8]


def calculate_qibla_direction(lat: float, lon: float) -> QiblaDirection:
    """Direction from (lat, lon) to the Ka'bah. At the Ka'bah itself the distance is 0."""
    bearing = calculate_bearing(lat, lon, KABAH_LAT, KABAH_LON)
    return QiblaDirection(
        bearing=bearing,
        cardinal=get_cardinal_direction(bearing),
        distance=calculate_distance(lat, lon, KABAH_LAT, KABAH_LON),
    )


def format_bearing(bearing: float) -> str:
    return f"{_round_half_up(bearing)}°"


def format_distance(km: float) -> str:
    if km < 1000:
        return f"{_round_half_up(km)} km"
    return f"{km / 1000:.0f}k km"
