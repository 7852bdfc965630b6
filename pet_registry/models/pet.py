"""Pet record aggregate and its update patch."""

from dataclasses import dataclass, fields, replace
from datetime import datetime
from decimal import Decimal

from pet_registry.models.base import Address, GeoPoint, ImageRef
from pet_registry.models.enums import PetStatus, Species


@dataclass(frozen=True)
class PetRecord:
    """A reported pet.

    Records are immutable values; every mutation stores a new version,
    so readers always see either the old or the new record.
    """

    pet_id: str | None  # Assigned by the store on insert
    name: str
    species: Species
    breed: str
    age: int
    color: str
    description: str
    last_seen: datetime
    address: Address
    location: GeoPoint
    owner: str
    contact_phone: str
    contact_email: str
    created_at: datetime
    updated_at: datetime
    images: tuple[ImageRef, ...] = ()
    status: PetStatus = PetStatus.MISSING
    reward: Decimal = Decimal("0")


@dataclass(frozen=True)
class PetPatch:
    """Changes to the mutable fields of a pet record.

    ``None`` means "leave unchanged". Identity, ownership, location and
    creation time are not represented here and therefore cannot change.
    """

    name: str | None = None
    species: Species | None = None
    breed: str | None = None
    age: int | None = None
    color: str | None = None
    description: str | None = None
    last_seen: datetime | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    reward: Decimal | None = None
    images: tuple[ImageRef, ...] | None = None
    status: PetStatus | None = None

    def changes(self) -> dict:
        """Return the fields this patch sets."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.changes()

    def apply_to(self, record: PetRecord, updated_at: datetime) -> PetRecord:
        """Return a new version of ``record`` with this patch applied."""
        return replace(record, **self.changes(), updated_at=updated_at)
