"""Synthetic missing-pet report generator."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from datetime import timezone
from typing import Any, Iterable, Iterator

from faker import Faker

from pet_registry.geo.distance import destination
from pet_registry.geocoding.base import GeocodeCandidate
from pet_registry.geocoding.static import StaticGeocoder
from pet_registry.models.base import GeoPoint
from pet_registry.models.enums import Species


@dataclass(frozen=True)
class PetReport:
    """A report payload plus the geocoding answer for its address."""

    pet_data: dict[str, Any]
    raw_address: str
    candidate: GeocodeCandidate


class PetReportGenerator:
    """Generate report payloads scattered around a centre point.

    Parameters
    ----------
    center : GeoPoint
        Points are placed within ``spread_km`` of this location.
    spread_km : float
        Maximum distance from the centre.
    city : str
        City name reported for every generated address.
    seed : int | None
        Seeds both Faker and the ``random`` module for reproducible
        batches.
    locale : str
        Faker locale (default ``en_US``).
    """

    SPECIES = list(Species)
    SPECIES_WEIGHTS = [0.50, 0.35, 0.05, 0.05, 0.05]

    BREEDS = {
        Species.DOG: ["Labrador Retriever", "German Shepherd", "Beagle", "Poodle", "Mixed"],
        Species.CAT: ["Domestic Shorthair", "Siamese", "Maine Coon", "Persian", "Mixed"],
        Species.BIRD: ["Cockatiel", "Budgerigar", "African Grey", "Canary"],
        Species.RABBIT: ["Holland Lop", "Netherland Dwarf", "Rex", "Lionhead"],
        Species.OTHER: ["Ferret", "Guinea Pig", "Tortoise"],
    }

    REWARDS = [0, 0, 0, 50, 100, 250, 500]

    def __init__(
        self,
        center: GeoPoint,
        spread_km: float = 25.0,
        city: str = "Mountain View",
        seed: int | None = None,
        locale: str = "en_US",
    ) -> None:
        self.fake = Faker(locale)
        if seed is not None:
            self.fake.seed_instance(seed)
            random.seed(seed)
        self.center = center
        self.spread_km = spread_km
        self.city = city

    def generate(self) -> PetReport:
        """Generate a single report."""
        return self._generate_one()

    def generate_batch(self, count: int) -> Iterator[PetReport]:
        """Generate multiple reports.

        Parameters
        ----------
        count : int
            Number of reports to generate.

        Yields
        ------
        PetReport
            Generated reports.
        """
        for _ in range(count):
            yield self._generate_one()

    def _generate_one(self) -> PetReport:
        species = random.choices(self.SPECIES, weights=self.SPECIES_WEIGHTS, k=1)[0]

        # sqrt keeps points uniform over the disc instead of bunched at the centre
        distance = self.spread_km * math.sqrt(random.random())
        point = destination(self.center, random.uniform(0.0, 360.0), distance)

        street = self.fake.street_address()
        state = self.fake.state_abbr()
        zipcode = self.fake.zipcode()
        raw_address = f"{street}, {self.city}, {state} {zipcode}"

        pet_data = {
            "name": self.fake.first_name(),
            "species": species.value,
            "breed": random.choice(self.BREEDS[species]),
            "age": random.randint(0, 15),
            "color": self.fake.color_name(),
            "description": self.fake.sentence(nb_words=10),
            "last_seen": self.fake.date_time_between(
                start_date="-30d", end_date="-1h", tzinfo=timezone.utc
            ).isoformat(),
            "contact_phone": self.fake.phone_number(),
            "contact_email": self.fake.safe_email(),
            "reward": random.choice(self.REWARDS),
        }

        candidate = GeocodeCandidate(
            longitude=point.longitude,
            latitude=point.latitude,
            formatted_address=f"{raw_address}, USA",
            street=street,
            city=self.city,
            state_code=state,
            zipcode=zipcode,
            country_code="US",
        )
        return PetReport(pet_data=pet_data, raw_address=raw_address, candidate=candidate)


def register_reports(geocoder: StaticGeocoder, reports: Iterable[PetReport]) -> None:
    """Teach ``geocoder`` the addresses of ``reports``."""
    for report in reports:
        geocoder.add(report.raw_address, report.candidate)
