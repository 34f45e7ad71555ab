"""Geographic helpers shared by the route model and the navigation simulator."""

from __future__ import annotations

import math
from typing import Iterable, Tuple

# Earth radius in meters
EARTH_RADIUS_M = 6371000.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in meters using the Haversine formula."""

    rlat1, rlon1 = math.radians(lat1), math.radians(lon1)
    rlat2, rlon2 = math.radians(lat2), math.radians(lon2)
    dlat = rlat2 - rlat1
    dlon = rlon2 - rlon1
    a = math.sin(dlat / 2) ** 2 + math.cos(rlat1) * math.cos(rlat2) * math.sin(dlon / 2) ** 2
    # Rounding can push ``a`` a hair above 1 for antipodal points.
    c = 2 * math.asin(math.sqrt(min(1.0, a)))
    return EARTH_RADIUS_M * c


def initial_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Initial great-circle bearing from point 1 to point 2.

    Returns degrees in ``[0, 360)``. Coincident points have no defined
    direction and yield ``0.0``.
    """

    if lat1 == lat2 and lon1 == lon2:
        return 0.0
    rlat1 = math.radians(lat1)
    rlat2 = math.radians(lat2)
    dlon = math.radians(lon2 - lon1)
    y = math.sin(dlon) * math.cos(rlat2)
    x = math.cos(rlat1) * math.sin(rlat2) - math.sin(rlat1) * math.cos(rlat2) * math.cos(dlon)
    return normalize_heading(math.degrees(math.atan2(y, x)))


def wrap_angle(value: float, lower: float, upper: float) -> float:
    """Wrap ``value`` into the half-open interval ``[lower, upper)``."""

    span = upper - lower
    wrapped = math.fmod(value - lower, span)
    result = wrapped + lower if wrapped >= 0 else wrapped + upper
    # fmod of a tiny negative number can land exactly on ``upper``
    return lower if result >= upper else result


def normalize_heading(angle: float) -> float:
    """Normalize an angle in degrees to ``[0, 360)``."""

    return wrap_angle(angle, 0.0, 360.0)


def heading_difference(heading: float, reference: float) -> float:
    """Signed change from ``reference`` to ``heading`` in ``[-180, 180)``.

    Positive values are clockwise (to the right).
    """

    return wrap_angle(heading - reference, -180.0, 180.0)


def interpolate(
    lat1: float, lon1: float, lat2: float, lon2: float, fraction: float
) -> Tuple[float, float]:
    """Linear interpolation in coordinate space.

    Only a good approximation for short steps, which is all the simulator
    needs.
    """

    return (
        lat1 + (lat2 - lat1) * fraction,
        lon1 + (lon2 - lon1) * fraction,
    )


def closest_index(points: Iterable[Tuple[float, float]], lat: float, lon: float) -> Tuple[int, float]:
    """Return ``(index, distance)`` of the point closest to ``(lat, lon)``.

    Linear scan; the earliest of equally distant points wins. An empty
    iterable gives ``(-1, inf)``.
    """

    best_index = -1
    best_distance = math.inf
    for index, (point_lat, point_lon) in enumerate(points):
        distance = haversine_distance(lat, lon, point_lat, point_lon)
        if distance < best_distance:
            best_distance = distance
            best_index = index
    return best_index, best_distance


# Display helpers

def bearing_to_compass(bearing: float) -> str:
    """Convert bearing degrees to a 16-point compass direction."""
    directions = ["N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
                  "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW"]
    index = int((normalize_heading(bearing) + 11.25) / 22.5) % 16
    return directions[index]


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human-readable string."""
    seconds = max(0.0, seconds)
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"


def format_distance(meters: float) -> str:
    """Format a distance for instruction panels."""
    meters = max(0.0, meters)
    if meters < 1000:
        return f"{meters:.0f} m"
    return f"{meters / 1000:.1f} km"
