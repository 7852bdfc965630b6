"""Nominatim (OpenStreetMap) geocoder.

Nominatim's usage policy allows one request per second and requires an
identifying User-Agent, so both are always sent.
"""

from __future__ import annotations

import logging

import requests

from pet_registry.exceptions import ProviderUnavailableError
from pet_registry.geocoding.base import GeocodeCandidate, Throttle

logger = logging.getLogger(__name__)

# Locality keys in the order Nominatim fills them, most specific last
_CITY_KEYS = ("city", "town", "village", "hamlet", "municipality")


class NominatimGeocoder:
    """Geocode addresses through a Nominatim ``/search`` endpoint."""

    BASE_URL = "https://nominatim.openstreetmap.org/search"

    def __init__(
        self,
        user_agent: str,
        timeout: float = 10.0,
        min_interval: float = 1.0,
        base_url: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.user_agent = user_agent
        self.timeout = timeout
        self.base_url = base_url or self.BASE_URL
        self._throttle = Throttle(min_interval)
        self._session = session or requests.Session()

    def geocode(self, address: str) -> list[GeocodeCandidate]:
        params = {
            "q": address,
            "format": "jsonv2",
            "addressdetails": 1,
            "limit": 1,
        }
        headers = {"User-Agent": self.user_agent}

        self._throttle.wait()
        try:
            response = self._session.get(
                self.base_url, params=params, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
            items = response.json()
        except requests.RequestException as e:
            raise ProviderUnavailableError(f"Nominatim request failed: {e}") from e
        except ValueError as e:
            raise ProviderUnavailableError("Nominatim returned invalid JSON") from e

        if not isinstance(items, list):
            raise ProviderUnavailableError("Unexpected Nominatim response shape")

        logger.debug("Nominatim returned %d candidates", len(items))
        return [_parse_item(item) for item in items]


def _parse_item(item: dict) -> GeocodeCandidate:
    try:
        latitude = float(item["lat"])
        longitude = float(item["lon"])
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderUnavailableError("Nominatim candidate has no usable coordinates") from e

    details = item.get("address") or {}
    street = " ".join(
        part for part in (details.get("house_number"), details.get("road")) if part
    )
    city = next((details[key] for key in _CITY_KEYS if details.get(key)), "")

    # "US-CA" -> "CA"; fall back to the full state name
    iso_region = details.get("ISO3166-2-lvl4", "")
    state_code = iso_region.split("-", 1)[1] if "-" in iso_region else details.get("state", "")

    return GeocodeCandidate(
        longitude=longitude,
        latitude=latitude,
        formatted_address=item.get("display_name", ""),
        street=street,
        city=city,
        state_code=state_code,
        zipcode=details.get("postcode", ""),
        country_code=details.get("country_code", "").upper(),
    )
