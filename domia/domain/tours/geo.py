"""
Geospatial helpers for tour estimation.
"""

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0
DEFAULT_SPEED_KMH = 30.0


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """
    Great-circle (haversine) distance between two points in kilometers.
    """
    dlat = math.radians(b.lat - a.lat)
    dlon = math.radians(b.lon - a.lon)
    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) * math.sin(dlon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def travel_time_minutes(distance: float, speed_kmh: float = DEFAULT_SPEED_KMH) -> float:
    """
    Driving time in minutes at a flat average speed (no traffic or road network).
    """
    if speed_kmh <= 0:
        raise ValueError("speed_kmh must be positive")
    return distance / speed_kmh * 60
