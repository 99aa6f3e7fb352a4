"""
Spherical-earth geometry helpers shared by route planning and route display.
"""

from math import radians, cos, sin, sqrt, atan2
from typing import Iterable, Tuple

EARTH_RADIUS_M = 6_371_000.0


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Calculate the great circle distance between two points in meters.
    """
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = radians(lat2 - lat1)
    delta_lng = radians(lng2 - lng1)

    a = sin(delta_lat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(delta_lng / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_M * c


def path_length_km(points: Iterable[Tuple[float, float]]) -> float:
    """
    Total length of an ordered path of (lat, lng) points in kilometers.

    Paths with fewer than two points have zero length.
    """
    total_m = 0.0
    previous = None
    for point in points:
        if previous is not None:
            total_m += haversine_meters(previous[0], previous[1], point[0], point[1])
        previous = point
    return total_m / 1000.0
