"""Location and media value objects shared by pet records."""

import math
from dataclasses import dataclass

from pet_registry.exceptions import ValidationError


@dataclass(frozen=True)
class GeoPoint:
    """A longitude/latitude pair in decimal degrees (WGS84)."""

    longitude: float
    latitude: float

    def __post_init__(self) -> None:
        for name, value, bound in (
            ("longitude", self.longitude, 180.0),
            ("latitude", self.latitude, 90.0),
        ):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationError(f"{name} must be a number")
            if math.isnan(value) or not -bound <= value <= bound:
                raise ValidationError(f"{name} must be within [-{bound:g}, {bound:g}]")


@dataclass(frozen=True)
class Address:
    """Normalized postal address produced by geocoding.

    ``raw`` keeps the text the reporter typed; every other field comes
    from the geocoding provider's first candidate.
    """

    raw: str
    formatted: str
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country_code: str = ""


@dataclass(frozen=True)
class ImageRef:
    """Reference to an image held by the media store."""

    url: str
    media_id: str
