"""Shared serialization utilities for pet records."""

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pet_registry.models.base import Address, GeoPoint, ImageRef
from pet_registry.models.enums import PetStatus, Species
from pet_registry.models.pet import PetRecord
from pet_registry.validation import parse_datetime


def dataclass_to_dict(obj: Any) -> dict:
    """Convert a dataclass (nested ones included) to a JSON-safe dict.

    Uses ``fields()`` + ``getattr`` rather than ``asdict()`` so frozen
    records are not deep-copied.
    """
    return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if is_dataclass(value) and not isinstance(value, type):
        return dataclass_to_dict(value)
    elif isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


def record_to_dict(record: PetRecord) -> dict:
    """Serialize a pet record."""
    return dataclass_to_dict(record)


def record_from_dict(data: dict) -> PetRecord:
    """Rebuild a pet record from :func:`record_to_dict` output."""
    return PetRecord(
        pet_id=data["pet_id"],
        name=data["name"],
        species=Species(data["species"]),
        breed=data["breed"],
        age=int(data["age"]),
        color=data["color"],
        description=data["description"],
        last_seen=parse_datetime(data["last_seen"]),
        address=Address(**data["address"]),
        location=GeoPoint(**data["location"]),
        owner=data["owner"],
        contact_phone=data["contact_phone"],
        contact_email=data["contact_email"],
        created_at=parse_datetime(data["created_at"]),
        updated_at=parse_datetime(data["updated_at"]),
        images=tuple(ImageRef(**image) for image in data.get("images", [])),
        status=PetStatus(data.get("status", PetStatus.MISSING.value)),
        reward=Decimal(data.get("reward", "0")),
    )
