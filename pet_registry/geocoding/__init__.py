"""Geocoding providers and address normalization."""

from pet_registry.config import GeocoderConfig
from pet_registry.exceptions import ConfigurationError
from pet_registry.geocoding.base import GeocodeCandidate, Geocoder
from pet_registry.geocoding.google import GoogleGeocoder
from pet_registry.geocoding.nominatim import NominatimGeocoder
from pet_registry.geocoding.normalizer import GeocodingNormalizer
from pet_registry.geocoding.static import StaticGeocoder


def create_geocoder(config: GeocoderConfig) -> Geocoder:
    """Build the geocoder named by ``config.provider``."""
    if config.provider == "nominatim":
        return NominatimGeocoder(
            user_agent=config.user_agent,
            timeout=config.timeout_seconds,
            min_interval=config.min_interval_seconds,
            base_url=config.base_url,
        )
    if config.provider == "google":
        return GoogleGeocoder(
            api_key=config.api_key,
            timeout=config.timeout_seconds,
            min_interval=config.min_interval_seconds,
            base_url=config.base_url,
        )
    if config.provider == "static":
        return StaticGeocoder()
    raise ConfigurationError(f"Unknown geocoder provider: {config.provider}")


__all__ = [
    "GeocodeCandidate",
    "Geocoder",
    "GeocodingNormalizer",
    "GoogleGeocoder",
    "NominatimGeocoder",
    "StaticGeocoder",
    "create_geocoder",
]
