"""Google Geocoding API geocoder."""

from __future__ import annotations

import logging

import requests

from pet_registry.exceptions import ConfigurationError, ProviderUnavailableError
from pet_registry.geocoding.base import GeocodeCandidate, Throttle

logger = logging.getLogger(__name__)


class GoogleGeocoder:
    """Geocode addresses through the Google Geocoding API.

    ``ZERO_RESULTS`` is a normal empty answer; every other non-OK
    status (quota, denied key, invalid request) is a provider failure.
    """

    BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(
        self,
        api_key: str | None,
        timeout: float = 10.0,
        min_interval: float = 0.05,
        base_url: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("Google geocoder requires an API key")
        self.api_key = api_key
        self.timeout = timeout
        self.base_url = base_url or self.BASE_URL
        self._throttle = Throttle(min_interval)
        self._session = session or requests.Session()

    def geocode(self, address: str) -> list[GeocodeCandidate]:
        self._throttle.wait()
        try:
            response = self._session.get(
                self.base_url,
                params={"address": address, "key": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise ProviderUnavailableError(f"Google geocoding request failed: {e}") from e
        except ValueError as e:
            raise ProviderUnavailableError("Google geocoding returned invalid JSON") from e

        status = payload.get("status")
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            message = payload.get("error_message") or status
            raise ProviderUnavailableError(f"Google geocoding error: {message}")

        results = payload.get("results") or []
        logger.debug("Google returned %d candidates", len(results))
        return [_parse_result(result) for result in results]


def _parse_result(result: dict) -> GeocodeCandidate:
    try:
        location = result["geometry"]["location"]
        latitude = float(location["lat"])
        longitude = float(location["lng"])
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderUnavailableError("Google candidate has no usable coordinates") from e

    components: dict[str, dict] = {}
    for component in result.get("address_components", []):
        for kind in component.get("types", []):
            components.setdefault(kind, component)

    def long_name(kind: str) -> str:
        return components.get(kind, {}).get("long_name", "")

    def short_name(kind: str) -> str:
        return components.get(kind, {}).get("short_name", "")

    street = " ".join(part for part in (long_name("street_number"), long_name("route")) if part)

    return GeocodeCandidate(
        longitude=longitude,
        latitude=latitude,
        formatted_address=result.get("formatted_address", ""),
        street=street,
        city=long_name("locality") or long_name("postal_town"),
        state_code=short_name("administrative_area_level_1"),
        zipcode=long_name("postal_code"),
        country_code=short_name("country"),
    )
