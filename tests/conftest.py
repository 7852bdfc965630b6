"""Pytest configuration and fixtures."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable

import pytest

from pet_registry.geocoding import GeocodeCandidate, GeocodingNormalizer, StaticGeocoder
from pet_registry.models import Address, GeoPoint, PetRecord, PetStatus, Species
from pet_registry.service import RegistryService
from pet_registry.store import PetRecordStore

REX_ADDRESS = "1600 Amphitheatre Parkway, Mountain View, CA"
PALO_ALTO_ADDRESS = "250 University Ave, Palo Alto, CA"
SAN_FRANCISCO_ADDRESS = "1 Dr Carlton B Goodlett Pl, San Francisco, CA"

MOUNTAIN_VIEW = GeoPoint(longitude=-122.0841, latitude=37.4220)

MOUNTAIN_VIEW_CANDIDATE = GeocodeCandidate(
    longitude=-122.0841,
    latitude=37.4220,
    formatted_address="1600 Amphitheatre Pkwy, Mountain View, CA 94043, USA",
    street="1600 Amphitheatre Pkwy",
    city="Mountain View",
    state_code="CA",
    zipcode="94043",
    country_code="US",
)

PALO_ALTO_CANDIDATE = GeocodeCandidate(
    longitude=-122.1430,
    latitude=37.4419,
    formatted_address="250 University Ave, Palo Alto, CA 94301, USA",
    street="250 University Ave",
    city="Palo Alto",
    state_code="CA",
    zipcode="94301",
    country_code="US",
)

SAN_FRANCISCO_CANDIDATE = GeocodeCandidate(
    longitude=-122.4194,
    latitude=37.7749,
    formatted_address="1 Dr Carlton B Goodlett Pl, San Francisco, CA 94102, USA",
    street="1 Dr Carlton B Goodlett Pl",
    city="San Francisco",
    state_code="CA",
    zipcode="94102",
    country_code="US",
)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def owner() -> str:
    """Identity that reports pets."""
    return "user-owner-001"


@pytest.fixture
def other_identity() -> str:
    """Identity that owns nothing."""
    return "user-other-002"


@pytest.fixture
def addresses() -> dict[str, str]:
    """Raw addresses known to the ``geocoder`` fixture."""
    return {
        "mountain_view": REX_ADDRESS,
        "palo_alto": PALO_ALTO_ADDRESS,
        "san_francisco": SAN_FRANCISCO_ADDRESS,
    }


@pytest.fixture
def geocoder() -> StaticGeocoder:
    """Geocoder that knows three Bay Area addresses."""
    return StaticGeocoder({
        REX_ADDRESS: [MOUNTAIN_VIEW_CANDIDATE],
        PALO_ALTO_ADDRESS: [PALO_ALTO_CANDIDATE],
        SAN_FRANCISCO_ADDRESS: [SAN_FRANCISCO_CANDIDATE],
    })


@pytest.fixture
def store() -> PetRecordStore:
    """Create a fresh store for each test."""
    return PetRecordStore()


@pytest.fixture
def service(store: PetRecordStore, geocoder: StaticGeocoder) -> RegistryService:
    """Registry service over the fresh store and static geocoder."""
    return RegistryService(store=store, normalizer=GeocodingNormalizer(geocoder))


@pytest.fixture
def pet_data() -> dict[str, Any]:
    """Valid report payload for a dog named Rex."""
    return {
        "name": "Rex",
        "species": "dog",
        "breed": "German Shepherd",
        "age": 4,
        "color": "Black and tan",
        "description": "Wearing a red collar, friendly",
        "last_seen": (datetime.now(timezone.utc) - timedelta(days=1)).isoformat(),
        "contact_phone": "+1 650 555 0100",
        "contact_email": "owner@example.com",
        "reward": 100,
    }


@pytest.fixture
def make_record() -> Callable[..., PetRecord]:
    """Factory for unsaved records; keyword arguments override fields."""

    def _make(
        location: GeoPoint = MOUNTAIN_VIEW,
        city: str = "Mountain View",
        **overrides: Any,
    ) -> PetRecord:
        now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        record = PetRecord(
            pet_id=None,
            name="Rex",
            species=Species.DOG,
            breed="German Shepherd",
            age=4,
            color="Black",
            description="Friendly",
            last_seen=now - timedelta(days=1),
            address=Address(raw=f"Somewhere, {city}", formatted=f"Somewhere, {city}", city=city),
            location=location,
            owner="user-owner-001",
            contact_phone="+1 650 555 0100",
            contact_email="owner@example.com",
            created_at=now,
            updated_at=now,
            status=PetStatus.MISSING,
            reward=Decimal("0"),
        )
        return replace(record, **overrides)

    return _make
