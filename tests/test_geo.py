import math

import pytest

from domia.domain.tours.geo import Coordinate, distance_km, travel_time_minutes


def test_distance_matches_known_value():
    # (0,0) to (0,1) is about 111.195 km on Earth.
    dist = distance_km(Coordinate(0.0, 0.0), Coordinate(0.0, 1.0))
    assert math.isclose(dist, 111.195, rel_tol=1e-3)


def test_distance_is_zero_for_identical_points():
    paris = Coordinate(48.8566, 2.3522)
    assert distance_km(paris, paris) == 0.0


def test_distance_is_symmetric():
    paris = Coordinate(48.8566, 2.3522)
    lyon = Coordinate(45.7640, 4.8357)
    assert distance_km(paris, lyon) == pytest.approx(distance_km(lyon, paris))
    # Roughly 392 km as the crow flies
    assert 385 < distance_km(paris, lyon) < 400


def test_travel_time_minutes_default_speed():
    # 30 km/h: 15 km takes half an hour
    assert travel_time_minutes(15.0) == pytest.approx(30.0)


def test_travel_time_minutes_scales_with_speed():
    minutes = travel_time_minutes(40.0, 40.0)
    assert math.isclose(minutes, 60.0, rel_tol=1e-6)
    assert travel_time_minutes(40.0, 80.0) < minutes


def test_travel_time_zero_distance():
    assert travel_time_minutes(0.0) == 0.0


@pytest.mark.parametrize("speed", [0.0, -5.0])
def test_travel_time_invalid_speed(speed):
    with pytest.raises(ValueError):
        travel_time_minutes(10.0, speed)
