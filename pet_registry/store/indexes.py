"""Secondary attribute index for filter-only queries."""

from __future__ import annotations

from pet_registry.models.enums import PetStatus, Species
from pet_registry.models.pet import PetRecord

AttributeKey = tuple[Species, PetStatus, str]


def normalize_city(city: str) -> str:
    """Case- and whitespace-insensitive city key."""
    return " ".join(city.split()).casefold()


class AttributeIndex:
    """Map ``(species, status, city)`` to record ids.

    Lookups may leave any component unconstrained. The number of
    distinct keys is small (species x status x cities), so partial
    lookups scan keys rather than records.

    Not thread-safe; the owning store serializes access.
    """

    def __init__(self) -> None:
        self._buckets: dict[AttributeKey, set[str]] = {}
        self._keys: dict[str, AttributeKey] = {}

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, pet_id: object) -> bool:
        return pet_id in self._keys

    @staticmethod
    def key_for(record: PetRecord) -> AttributeKey:
        return record.species, record.status, normalize_city(record.address.city)

    def add(self, pet_id: str, record: PetRecord) -> None:
        """Index ``record`` under ``pet_id``, replacing any previous key."""
        self.discard(pet_id)
        key = self.key_for(record)
        self._buckets.setdefault(key, set()).add(pet_id)
        self._keys[pet_id] = key

    def discard(self, pet_id: str) -> None:
        key = self._keys.pop(pet_id, None)
        if key is None:
            return
        bucket = self._buckets[key]
        bucket.discard(pet_id)
        if not bucket:
            del self._buckets[key]

    def clear(self) -> None:
        self._buckets.clear()
        self._keys.clear()

    def lookup(
        self,
        species: Species | None = None,
        status: PetStatus | None = None,
        city: str | None = None,
    ) -> set[str]:
        """Ids matching every supplied component.

        ``city`` must already be normalized with :func:`normalize_city`.
        """
        if species is not None and status is not None and city is not None:
            return set(self._buckets.get((species, status, city), ()))

        matches: set[str] = set()
        for (key_species, key_status, key_city), ids in self._buckets.items():
            if species is not None and key_species != species:
                continue
            if status is not None and key_status != status:
                continue
            if city is not None and key_city != city:
                continue
            matches.update(ids)
        return matches
