from __future__ import annotations

from math import atan2, cos, radians, sin, sqrt

from .models import Coordinates

EARTH_RADIUS_KM = 6371.0
LOCATION_CHANGE_THRESHOLD_KM = 5.0


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance in kilometres between two points."""
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    dlat = radians(b.lat - a.lat)
    dlng = radians(b.lng - a.lng)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    return EARTH_RADIUS_KM * 2 * atan2(sqrt(h), sqrt(1 - h))


def format_distance_label(distance_km: float) -> str:
    return f"{distance_km:.1f} km away"


def moved_beyond_threshold(
    old: Coordinates | None,
    new: Coordinates | None,
    threshold_km: float = LOCATION_CHANGE_THRESHOLD_KM,
) -> bool:
    """Return True when the user moved strictly more than *threshold_km*.

    A missing location on either side never counts as a move.
    """
    if old is None or new is None:
        return False
    return haversine_km(old, new) > threshold_km
