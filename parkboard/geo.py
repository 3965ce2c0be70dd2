from __future__ import annotations

import math
from enum import Enum


class DistanceUnit(str, Enum):
    KM = "km"
    MI = "mi"

    @property
    def earth_radius(self) -> float:
        return EARTH_RADIUS[self]


EARTH_RADIUS = {
    DistanceUnit.KM: 6371.0,
    DistanceUnit.MI: 3959.0,
}


def haversine(lat1: float, lng1: float, lat2: float, lng2: float, earth_radius: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    # Rounding can land a just outside [0, 1] near antipodes.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return earth_radius * c


def distance_between(
    lat1: float,
    lng1: float,
    lat2: float,
    lng2: float,
    unit: DistanceUnit = DistanceUnit.MI,
) -> float:
    """Great-circle distance expressed in ``unit``."""
    return haversine(lat1, lng1, lat2, lng2, DistanceUnit(unit).earth_radius)
