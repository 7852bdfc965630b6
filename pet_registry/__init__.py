"""Geospatial registry and search engine for missing pets."""

from pet_registry.config import RegistryConfig
from pet_registry.exceptions import (
    GeocodeError,
    InvalidTransitionError,
    NoMatchError,
    PetRegistryError,
    ProviderUnavailableError,
    RecordNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from pet_registry.models import Address, GeoPoint, ImageRef, PetPatch, PetRecord, PetStatus, Species
from pet_registry.search import QuerySpec, SearchCriteria, SearchPlanner
from pet_registry.service import RegistryService, build_service
from pet_registry.store import PetRecordStore

__version__ = "0.1.0"

__all__ = [
    "Address",
    "GeoPoint",
    "GeocodeError",
    "ImageRef",
    "InvalidTransitionError",
    "NoMatchError",
    "PetPatch",
    "PetRecord",
    "PetRecordStore",
    "PetRegistryError",
    "PetStatus",
    "ProviderUnavailableError",
    "QuerySpec",
    "RecordNotFoundError",
    "RegistryConfig",
    "RegistryService",
    "SearchCriteria",
    "SearchPlanner",
    "Species",
    "UnauthorizedError",
    "ValidationError",
    "build_service",
]
