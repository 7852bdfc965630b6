"""Turn a free-text address into a canonical Address and GeoPoint."""

from __future__ import annotations

import logging

from pet_registry.exceptions import (
    NoMatchError,
    ProviderUnavailableError,
    ValidationError,
)
from pet_registry.geocoding.base import Geocoder, GeocodeCandidate
from pet_registry.models.base import Address, GeoPoint

logger = logging.getLogger(__name__)


class GeocodingNormalizer:
    """Resolve raw addresses through a geocoding provider.

    The provider is called once per address and its first candidate is
    taken as-is; candidate ordering is the provider's. Retries, if any,
    belong to the caller.

    Parameters
    ----------
    geocoder : Geocoder
        Provider used for lookups.
    """

    def __init__(self, geocoder: Geocoder) -> None:
        self.geocoder = geocoder

    def normalize(self, raw_address: str) -> tuple[Address, GeoPoint]:
        """Geocode ``raw_address``.

        Parameters
        ----------
        raw_address : str
            Address as typed by the reporter.

        Returns
        -------
        tuple[Address, GeoPoint]
            Normalized address and its location.

        Raises
        ------
        ValidationError
            If the address is empty after trimming.
        NoMatchError
            If the provider found nothing.
        ProviderUnavailableError
            If the provider failed or returned an unusable candidate.
        """
        if not isinstance(raw_address, str) or not raw_address.strip():
            raise ValidationError("Address is required")
        query = raw_address.strip()

        try:
            candidates = self.geocoder.geocode(query)
        except ProviderUnavailableError:
            logger.warning("Geocoding provider unavailable for %r", query)
            raise
        except OSError as e:
            logger.warning("Geocoding transport failure for %r: %s", query, e)
            raise ProviderUnavailableError(f"Geocoding failed: {e}") from e

        if not candidates:
            logger.info("No geocoding match for %r", query)
            raise NoMatchError(f"No location found for address: {query}")

        return _to_canonical(query, candidates[0])


def _to_canonical(raw: str, candidate: GeocodeCandidate) -> tuple[Address, GeoPoint]:
    try:
        point = GeoPoint(longitude=candidate.longitude, latitude=candidate.latitude)
    except ValidationError as e:
        raise ProviderUnavailableError(f"Provider returned invalid coordinates: {e}") from e

    address = Address(
        raw=raw,
        formatted=candidate.formatted_address or raw,
        street=candidate.street or "",
        city=candidate.city or "",
        state=candidate.state_code or "",
        zip_code=candidate.zipcode or "",
        country_code=candidate.country_code or "",
    )
    return address, point
