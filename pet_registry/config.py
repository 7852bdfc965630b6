"""Configuration management for pet-registry."""

from dataclasses import dataclass, field
from pathlib import Path

from pet_registry.exceptions import ConfigurationError
from pet_registry.logging import LOG_FORMATS

GEOCODER_PROVIDERS = ("nominatim", "google", "static")


@dataclass
class GeocoderConfig:
    """Geocoding provider configuration."""

    provider: str = "nominatim"
    api_key: str | None = None
    user_agent: str = "pet-registry/0.1"
    timeout_seconds: float = 10.0
    min_interval_seconds: float = 1.0  # Nominatim usage policy: 1 req/s
    base_url: str | None = None


@dataclass
class SearchConfig:
    """Search and spatial index configuration."""

    max_radius_km: float = 100.0
    cell_size_deg: float = 0.25


@dataclass
class MediaConfig:
    """Local media store configuration."""

    upload_dir: Path = field(default_factory=lambda: Path("uploads"))
    base_url: str = "/uploads"
    max_images: int = 5


@dataclass
class StoreConfig:
    """Record store persistence configuration."""

    snapshot_path: Path | None = None
    pretty_json: bool = False


@dataclass
class RegistryConfig:
    """Main configuration for pet-registry."""

    geocoder: GeocoderConfig = field(default_factory=GeocoderConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    media: MediaConfig = field(default_factory=MediaConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    log_level: str = "INFO"
    log_format: str = "standard"

    def validate(self) -> None:
        """Check cross-field constraints.

        Raises
        ------
        ConfigurationError
            If any value is out of range.
        """
        if self.geocoder.provider not in GEOCODER_PROVIDERS:
            raise ConfigurationError(f"Unknown geocoder provider: {self.geocoder.provider}")
        if self.geocoder.timeout_seconds <= 0:
            raise ConfigurationError("Geocoder timeout must be positive")
        if self.search.max_radius_km <= 0:
            raise ConfigurationError("Maximum search radius must be positive")
        if not 0 < self.search.cell_size_deg <= 90:
            raise ConfigurationError("Cell size must be in (0, 90] degrees")
        if self.media.max_images < 0:
            raise ConfigurationError("Maximum image count cannot be negative")
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(f"Unknown log format: {self.log_format}")

    @classmethod
    def from_env(cls) -> "RegistryConfig":
        """Create config from environment variables."""
        import os

        try:
            geocoder = GeocoderConfig(
                provider=os.getenv("GEOCODER_PROVIDER", "nominatim").lower(),
                api_key=os.getenv("GEOCODER_API_KEY") or None,
                user_agent=os.getenv("GEOCODER_USER_AGENT", "pet-registry/0.1"),
                timeout_seconds=float(os.getenv("GEOCODER_TIMEOUT", "10")),
                min_interval_seconds=float(os.getenv("GEOCODER_MIN_INTERVAL", "1")),
                base_url=os.getenv("GEOCODER_BASE_URL") or None,
            )

            search = SearchConfig(
                max_radius_km=float(os.getenv("SEARCH_MAX_RADIUS_KM", "100")),
                cell_size_deg=float(os.getenv("SEARCH_CELL_SIZE_DEG", "0.25")),
            )

            media = MediaConfig(
                upload_dir=Path(os.getenv("MEDIA_DIR", "uploads")),
                base_url=os.getenv("MEDIA_BASE_URL", "/uploads"),
                max_images=int(os.getenv("MEDIA_MAX_IMAGES", "5")),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        snapshot = os.getenv("STORE_SNAPSHOT_PATH")
        store = StoreConfig(
            snapshot_path=Path(snapshot) if snapshot else None,
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        config = cls(
            geocoder=geocoder,
            search=search,
            media=media,
            store=store,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard").lower(),
        )
        config.validate()
        return config
