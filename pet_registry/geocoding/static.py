"""In-memory geocoder backed by a fixed address table."""

from __future__ import annotations

import threading

from pet_registry.geocoding.base import GeocodeCandidate


def normalize_key(address: str) -> str:
    """Case- and whitespace-insensitive lookup key."""
    return " ".join(address.split()).casefold()


class StaticGeocoder:
    """Answer geocoding requests from a preloaded table.

    Used for local development, seeding and tests. Unknown addresses
    yield no candidates. Every lookup is recorded in ``calls``.
    """

    def __init__(self, table: dict[str, list[GeocodeCandidate]] | None = None) -> None:
        self._table: dict[str, list[GeocodeCandidate]] = {}
        self._lock = threading.Lock()
        self.calls: list[str] = []
        for address, candidates in (table or {}).items():
            self._table[normalize_key(address)] = list(candidates)

    def add(self, address: str, *candidates: GeocodeCandidate) -> None:
        """Register candidates for ``address``, appended after existing ones."""
        with self._lock:
            self._table.setdefault(normalize_key(address), []).extend(candidates)

    def geocode(self, address: str) -> list[GeocodeCandidate]:
        with self._lock:
            self.calls.append(address)
            return list(self._table.get(normalize_key(address), []))
