"""Geodesic distance and spatial indexing."""

from pet_registry.geo.distance import (
    EARTH_RADIUS_KM,
    central_angle,
    destination,
    distance_km,
    km_to_radians,
    radians_to_km,
)
from pet_registry.geo.index import GeoCellIndex

__all__ = [
    "EARTH_RADIUS_KM",
    "GeoCellIndex",
    "central_angle",
    "destination",
    "distance_km",
    "km_to_radians",
    "radians_to_km",
]
