"""Domain models for the pet registry."""

from pet_registry.models.base import Address, GeoPoint, ImageRef
from pet_registry.models.enums import PetStatus, QueryKind, Species
from pet_registry.models.pet import PetPatch, PetRecord

__all__ = [
    "Address",
    "GeoPoint",
    "ImageRef",
    "PetPatch",
    "PetRecord",
    "PetStatus",
    "QueryKind",
    "Species",
]
