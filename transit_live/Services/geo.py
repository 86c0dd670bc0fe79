# transit_live/Services/geo.py
"""
Geo Utility
===========
Great-circle distance and proximity test used by stop arrival detection.

Funciones:
- calculate_haversine_distance(): distance in meters between two coordinates
- is_within_radius(): proximity test against a radius in meters
"""

from math import radians, sin, cos, sqrt, atan2
from typing import Callable

EARTH_RADIUS_M = 6371000

DistanceFn = Callable[[float, float, float, float], float]


def calculate_haversine_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float
) -> float:
    """
    Great-circle distance between two points using the Haversine formula.

    Formula:
        a = sin²(Δlat/2) + cos(lat1) * cos(lat2) * sin²(Δlon/2)
        c = 2 * atan2(√a, √(1−a))
        d = R * c

    Args:
        lat1, lon1: First point (decimal degrees)
        lat2, lon2: Second point (decimal degrees)

    Returns:
        float: Distance in meters

    Examples:
        >>> calculate_haversine_distance(10.0, -74.0, 10.001, -74.0)
        111.19...
        >>> calculate_haversine_distance(10.5, -74.8, 10.5, -74.8)
        0.0

    Notes:
        - Spherical Earth (R = 6371 km); error well under 0.5% at stop scale
    """
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = radians(lat2 - lat1)
    delta_lon = radians(lon2 - lon1)

    a = sin(delta_lat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(delta_lon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_M * c


def is_within_radius(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    radius_m: float,
    distance_fn: DistanceFn = calculate_haversine_distance
) -> bool:
    """
    True when the two points are at most ``radius_m`` meters apart (inclusive).
    """
    return distance_fn(lat1, lon1, lat2, lon2) <= radius_m
