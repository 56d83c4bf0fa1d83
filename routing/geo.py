"""
Purpose: Great-circle distance between two (lat, lon) points.
What it does:
Validates decimal-degree coordinates and computes haversine distance in km.
Used by fee resolution, driver scoring and ETA estimation.

Rule: Pure functions only. No I/O, no shared state.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Tuple

# internal coordinate type: (lat, lon)
LatLon = Tuple[float, float]

EARTH_RADIUS_KM = 6371.0


class InvalidCoordinate(ValueError):
    """Raised when a latitude/longitude pair is malformed or out of range."""
    pass


def validate_coordinate(point) -> LatLon:
    """
    Returns the point as a (lat, lon) float tuple or raises InvalidCoordinate.

    lat must be in [-90, 90] and lon in [-180, 180]. Booleans, None and NaN are rejected.
    """
    try:
        lat, lon = point
    except (TypeError, ValueError):
        raise InvalidCoordinate(f"Expected a (lat, lon) pair, got {point!r}")

    for name, value in (("latitude", lat), ("longitude", lon)):
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidCoordinate(f"{name} must be a number, got {value!r}")
        if not math.isfinite(value):
            raise InvalidCoordinate(f"{name} must be finite, got {value!r}")

    if not -90.0 <= lat <= 90.0:
        raise InvalidCoordinate(f"latitude {lat} out of range [-90, 90]")
    if not -180.0 <= lon <= 180.0:
        raise InvalidCoordinate(f"longitude {lon} out of range [-180, 180]")

    return float(lat), float(lon)


def distance_km(point_a, point_b) -> float:
    """
    Haversine distance in kilometers between two (lat, lon) points.

    distance_km(a, a) is exactly 0.0 and distance_km(a, b) == distance_km(b, a).
    """
    lat1, lon1 = validate_coordinate(point_a)
    lat2, lon2 = validate_coordinate(point_b)

    if (lat1, lon1) == (lat2, lon2):
        return 0.0

    # abs() keeps the half-angle terms identical whichever point comes first
    delta_lat = math.radians(abs(lat2 - lat1))
    delta_lon = math.radians(abs(lon2 - lon1))

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.asin(min(1.0, math.sqrt(a)))

    return EARTH_RADIUS_KM * c
