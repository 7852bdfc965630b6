"""Great-circle distance helpers.

The spatial index works in radians of central angle, the same unit
MongoDB's ``$centerSphere`` uses. Kilometres are converted once at the
query boundary with :func:`km_to_radians`.
"""

import math

from pet_registry.models.base import GeoPoint

EARTH_RADIUS_KM = 6371.0088  # IUGG mean radius


def km_to_radians(km: float) -> float:
    """Convert a surface distance in kilometres to a central angle."""
    return km / EARTH_RADIUS_KM


def radians_to_km(angle: float) -> float:
    """Convert a central angle to a surface distance in kilometres."""
    return angle * EARTH_RADIUS_KM


def central_angle(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine central angle between two points, in radians."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * math.asin(math.sqrt(min(1.0, h)))


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in kilometres."""
    return radians_to_km(central_angle(a, b))


def destination(origin: GeoPoint, bearing_deg: float, distance: float) -> GeoPoint:
    """Point reached from ``origin`` along a great circle.

    Parameters
    ----------
    origin : GeoPoint
        Starting point.
    bearing_deg : float
        Initial bearing, degrees clockwise from north.
    distance : float
        Distance travelled, in kilometres.
    """
    angle = km_to_radians(distance)
    bearing = math.radians(bearing_deg)
    lat1 = math.radians(origin.latitude)
    lon1 = math.radians(origin.longitude)

    lat2 = math.asin(
        math.sin(lat1) * math.cos(angle) + math.cos(lat1) * math.sin(angle) * math.cos(bearing)
    )
    lon2 = lon1 + math.atan2(
        math.sin(bearing) * math.sin(angle) * math.cos(lat1),
        math.cos(angle) - math.sin(lat1) * math.sin(lat2),
    )
    longitude = (math.degrees(lon2) + 540.0) % 360.0 - 180.0
    latitude = max(-90.0, min(90.0, math.degrees(lat2)))
    return GeoPoint(longitude=longitude, latitude=latitude)
