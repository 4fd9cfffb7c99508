"""
Geofence
--------

Pure functions for deciding whether a point lies in a circular zone.

Distances are great-circle distances computed with the haversine
formula. Points are ``(latitude, longitude)`` pairs in degrees.
"""
from math import radians, sin, cos, atan2, sqrt, isfinite
from typing import Iterable, NamedTuple, Optional, Tuple, TypeVar

from cycleserver.service.exceptions import InvalidLocation

EARTH_RADIUS = 6371000
"""The mean radius of the earth, in meters."""

LatLon = Tuple[float, float]


class Zone(NamedTuple):
    latitude: float
    longitude: float
    radius: float


Z = TypeVar("Z")


def validate_coordinates(latitude: float, longitude: float):
    """
    :raises InvalidLocation: If the values are not finite, or not on the globe.
    """
    if not (isfinite(latitude) and isfinite(longitude)):
        raise InvalidLocation(f"Coordinates ({latitude}, {longitude}) must be finite numbers.")
    if abs(latitude) > 90:
        raise InvalidLocation(f"Latitude {latitude} must be between -90 and 90.")
    if abs(longitude) > 180:
        raise InvalidLocation(f"Longitude {longitude} must be between -180 and 180.")


def distance(p1: LatLon, p2: LatLon) -> float:
    """The distance in meters between two points."""
    lat1, lon1 = p1
    lat2, lon2 = p2

    phi1 = radians(lat1)
    phi2 = radians(lat2)
    delta_phi = radians(lat2 - lat1)
    delta_lambda = radians(lon2 - lon1)

    a = sin(delta_phi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(delta_lambda / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS * c


def is_within(point: LatLon, center: LatLon, radius: float) -> bool:
    """Checks if the point is inside the circle. The boundary counts as inside."""
    return distance(point, center) <= radius


def find_containing(point: LatLon, zones: Iterable[Z]) -> Optional[Z]:
    """
    Finds the first zone containing the point.

    When zones overlap, the earliest in the given order wins, even if
    a later one has a closer center.

    :param zones: Anything with a ``latitude``, ``longitude`` and ``radius``.
    """
    for zone in zones:
        if is_within(point, (zone.latitude, zone.longitude), zone.radius):
            return zone
    return None
