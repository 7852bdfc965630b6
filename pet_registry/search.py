"""Search criteria and query planning.

The planner turns caller criteria into a :class:`QuerySpec` naming the
access path explicitly. Precedence is spatial, then city, then plain
attribute filters. Partial spatial input (a radius without a centre or
the reverse) falls back to the attribute path instead of failing:
proximity refines a search, it is never required for one.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping

from pet_registry.exceptions import ValidationError
from pet_registry.geo.distance import km_to_radians
from pet_registry.models.base import GeoPoint
from pet_registry.models.enums import PetStatus, QueryKind, Species
from pet_registry.store.indexes import normalize_city
from pet_registry.validation import parse_species, parse_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchCriteria:
    """Caller-supplied search filters; every field is optional."""

    species: Species | None = None
    status: PetStatus | None = None
    city: str | None = None
    center: GeoPoint | None = None
    radius_km: float | None = None
    nearest_first: bool = False

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "SearchCriteria":
        """Build criteria from transport-style query parameters.

        Recognized keys: ``species``, ``status``, ``city``, ``lat``,
        ``lng`` (or ``lon``), ``radius`` (or ``radius_km``) and
        ``sort=distance``. Blank values count as absent.

        Raises
        ------
        ValidationError
            If a value is present but malformed.
        """

        def get(*keys: str) -> Any:
            for key in keys:
                value = params.get(key)
                if value is not None and not (isinstance(value, str) and not value.strip()):
                    return value
            return None

        species = get("species")
        status = get("status")
        city = get("city")
        lat = _parse_float("lat", get("lat", "latitude"))
        lng = _parse_float("lng", get("lng", "lon", "longitude"))
        radius = _parse_float("radius", get("radius", "radius_km", "radiusKm"))
        sort = get("sort")

        center = None
        if lat is not None and lng is not None:
            center = GeoPoint(longitude=lng, latitude=lat)

        return cls(
            species=parse_species(species) if species is not None else None,
            status=parse_status(status) if status is not None else None,
            city=str(city).strip() if city is not None else None,
            center=center,
            radius_km=radius,
            nearest_first=str(sort).strip().lower() == "distance" if sort is not None else False,
        )


@dataclass(frozen=True)
class QuerySpec:
    """A fully planned query.

    ``radius`` is a central angle in radians, the spatial index's native
    unit. On the spatial path ``species``/``status`` are post-filters
    applied during the scan and ``city`` is always ``None``.
    """

    kind: QueryKind
    species: Species | None = None
    status: PetStatus | None = None
    city: str | None = None
    center: GeoPoint | None = None
    radius: float | None = None
    nearest_first: bool = False

    @property
    def is_spatial(self) -> bool:
        return self.kind is QueryKind.SPATIAL


class SearchPlanner:
    """Plan searches against the record store.

    Parameters
    ----------
    max_radius_km : float
        Radii above this are clamped to it.
    """

    def __init__(self, max_radius_km: float = 100.0) -> None:
        if max_radius_km <= 0:
            raise ValueError("max_radius_km must be positive")
        self.max_radius_km = max_radius_km

    def plan(self, criteria: SearchCriteria) -> QuerySpec:
        species = parse_species(criteria.species) if criteria.species is not None else None
        status = parse_status(criteria.status) if criteria.status is not None else None

        if criteria.center is not None and criteria.radius_km is not None:
            radius_km = float(criteria.radius_km)
            if math.isnan(radius_km) or radius_km < 0:
                raise ValidationError("Search radius cannot be negative")
            if radius_km > self.max_radius_km:
                logger.debug("Clamping radius %.1f km to %.1f km", radius_km, self.max_radius_km)
                radius_km = self.max_radius_km
            return QuerySpec(
                kind=QueryKind.SPATIAL,
                species=species,
                status=status,
                center=criteria.center,
                radius=km_to_radians(radius_km),
                nearest_first=criteria.nearest_first,
            )

        if criteria.center is not None or criteria.radius_km is not None:
            logger.debug("Incomplete spatial criteria; planning attribute query")

        city = normalize_city(criteria.city) if criteria.city else None
        return QuerySpec(
            kind=QueryKind.ATTRIBUTE,
            species=species,
            status=status,
            city=city or None,
        )


def _parse_float(name: str, value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Parameter '{name}' must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Parameter '{name}' must be a number") from None
    if not math.isfinite(number):
        raise ValidationError(f"Parameter '{name}' must be finite")
    return number
