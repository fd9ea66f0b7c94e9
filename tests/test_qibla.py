import pytest

from waktu_dashboard.plugins.qibla.qibla_service import (
    KABAH_LAT,
    KABAH_LON,
    calculate_qibla_direction,
    format_bearing,
    format_distance,
    get_cardinal_direction,
)


def test_at_the_kabah():
    direction = calculate_qibla_direction(KABAH_LAT, KABAH_LON)
    assert direction.distance == pytest.approx(0.0, abs=1e-6)
    assert 0 <= direction.bearing < 360


def test_kuala_lumpur():
    direction = calculate_qibla_direction(3.139, 101.6869)
    assert 290 < direction.bearing < 295
    assert direction.cardinal in ("W", "NW")
    assert 6900 < direction.distance < 7300


def test_london_faces_south_east():
    direction = calculate_qibla_direction(51.5074, -0.1278)
    assert 115 < direction.bearing < 122
    assert direction.cardinal == "SE"


@pytest.mark.parametrize("bearing, expected", [
    (0, "N"), (22.4, "N"), (22.5, "NE"), (90, "E"), (180, "S"), (270, "W"), (337.5, "N"), (359.9, "N"),
])
def test_cardinal_direction(bearing, expected):
    assert get_cardinal_direction(bearing) == expected


def test_formatting():
    assert format_bearing(292.5) == "293°"
    assert format_bearing(0.2) == "0°"
    assert format_distance(850.4) == "850 km"
    assert format_distance(7035.2) == "7k km"
