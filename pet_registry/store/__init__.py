"""Record storage and indexing."""

from pet_registry.store.indexes import AttributeIndex, normalize_city
from pet_registry.store.pets import PetRecordStore

__all__ = ["AttributeIndex", "PetRecordStore", "normalize_city"]
