"""Validation of report payloads and update patches.

Validators collect every problem before raising, so a caller gets the
full list in ``ValidationError.errors`` rather than one error per retry.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

from pet_registry.exceptions import ValidationError
from pet_registry.models.base import ImageRef
from pet_registry.models.enums import PetStatus, Species
from pet_registry.models.pet import PetPatch

EMAIL_PATTERN = re.compile(r"^\w+(?:[.-]\w+)*@\w+(?:[.-]\w+)*\.\w{2,3}$")

MAX_EMAIL_LENGTH = 254

# Transport payloads may use the camelCase names of the public API
FIELD_ALIASES = {
    "lastSeen": "last_seen",
    "contactPhone": "contact_phone",
    "contactEmail": "contact_email",
}

REQUIRED_TEXT_FIELDS = ("name", "breed", "color", "description", "contact_phone")

MUTABLE_FIELDS = frozenset({
    "name",
    "species",
    "breed",
    "age",
    "color",
    "description",
    "last_seen",
    "contact_phone",
    "contact_email",
    "reward",
    "images",
    "status",
})

IMMUTABLE_FIELDS = frozenset({
    "id",
    "_id",
    "pet_id",
    "owner",
    "created_at",
    "createdAt",
    "updated_at",
    "updatedAt",
    "location",
    "address",
})


@dataclass(frozen=True)
class PetDetails:
    """Validated descriptive fields of a new report."""

    name: str
    species: Species
    breed: str
    age: int
    color: str
    description: str
    last_seen: datetime
    contact_phone: str
    contact_email: str
    reward: Decimal
    images: tuple[ImageRef, ...]


def validate_report(
    data: Mapping[str, Any],
    images: Iterable[ImageRef | Mapping[str, Any]] = (),
    max_images: int = 5,
    now: datetime | None = None,
) -> PetDetails:
    """Validate the payload of a new pet report.

    Parameters
    ----------
    data : Mapping[str, Any]
        Descriptive fields (snake_case or camelCase keys).
    images : Iterable[ImageRef | Mapping]
        Uploaded image references in upload order.
    max_images : int
        Maximum number of images accepted.
    now : datetime | None
        Reference time for the ``last_seen`` check (default: now, UTC).

    Returns
    -------
    PetDetails
        Normalized, validated fields.

    Raises
    ------
    ValidationError
        Listing every missing or malformed field.
    """
    now = now or datetime.now(timezone.utc)
    fields = _canonical_keys(data)
    errors: list[str] = []
    values: dict[str, Any] = {}

    for name in REQUIRED_TEXT_FIELDS:
        _collect(errors, values, name, lambda n=name: _parse_text(n, fields.get(n)))

    _collect(errors, values, "species", lambda: parse_species(fields.get("species")))
    _collect(errors, values, "age", lambda: _parse_age(fields.get("age")))
    _collect(errors, values, "last_seen", lambda: _parse_last_seen(fields.get("last_seen"), now))
    _collect(errors, values, "contact_email", lambda: _parse_email(fields.get("contact_email")))
    _collect(errors, values, "reward", lambda: _parse_reward(fields.get("reward", 0)))
    _collect(errors, values, "images", lambda: parse_images(images, max_images))

    if errors:
        raise ValidationError("Invalid pet report", errors)
    return PetDetails(**values)


def parse_patch(
    data: Mapping[str, Any],
    max_images: int = 5,
    now: datetime | None = None,
) -> PetPatch:
    """Validate an update payload into a :class:`PetPatch`.

    Only mutable fields are accepted; identity, ownership, location and
    timestamps are rejected outright rather than silently ignored.
    """
    now = now or datetime.now(timezone.utc)
    fields = _canonical_keys(data)
    errors: list[str] = []
    values: dict[str, Any] = {}

    for key in fields:
        if key in IMMUTABLE_FIELDS:
            errors.append(f"Field '{key}' cannot be modified")
        elif key not in MUTABLE_FIELDS:
            errors.append(f"Unknown field '{key}'")

    parsers = {
        "species": parse_species,
        "status": parse_status,
        "age": _parse_age,
        "last_seen": lambda v: _parse_last_seen(v, now),
        "contact_email": _parse_email,
        "reward": _parse_reward,
        "images": lambda v: parse_images(v or (), max_images),
    }
    for key in sorted(MUTABLE_FIELDS & fields.keys()):
        value = fields[key]
        parser = parsers.get(key, lambda v, k=key: _parse_text(k, v))
        _collect(errors, values, key, lambda p=parser, v=value: p(v))

    if errors:
        raise ValidationError("Invalid update", errors)
    if not values:
        raise ValidationError("Update contains no changes")
    return PetPatch(**values)


def parse_species(value: Any) -> Species:
    if isinstance(value, Species):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Species is required")
    try:
        return Species(value.strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in Species)
        raise ValidationError(f"Species must be one of: {allowed}") from None


def parse_status(value: Any) -> PetStatus:
    if isinstance(value, PetStatus):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Status is required")
    try:
        return PetStatus(value.strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in PetStatus)
        raise ValidationError(f"Status must be one of: {allowed}") from None


def parse_datetime(value: Any) -> datetime:
    """Parse a datetime or ISO-8601 string; naive values are taken as UTC."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"Invalid date: {value!r}") from None
    if not isinstance(value, datetime):
        raise ValidationError("Date must be an ISO-8601 string or datetime")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def parse_images(
    images: Iterable[ImageRef | Mapping[str, Any]],
    max_images: int = 5,
) -> tuple[ImageRef, ...]:
    """Normalize image references, keeping upload order."""
    refs = []
    for item in images:
        if isinstance(item, ImageRef):
            refs.append(item)
            continue
        if not isinstance(item, Mapping):
            raise ValidationError("Image references must have url and media_id")
        url = item.get("url")
        media_id = item.get("media_id") or item.get("mediaId") or item.get("public_id")
        if not url or not media_id:
            raise ValidationError("Image references must have url and media_id")
        refs.append(ImageRef(url=str(url), media_id=str(media_id)))

    if len(refs) > max_images:
        raise ValidationError(f"At most {max_images} images are allowed")
    return tuple(refs)


def _canonical_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ValidationError("Payload must be a mapping")
    return {FIELD_ALIASES.get(key, key): value for key, value in data.items()}


def _collect(errors: list[str], values: dict[str, Any], name: str, parse) -> None:
    try:
        values[name] = parse()
    except ValidationError as e:
        errors.extend(e.errors)


def _parse_text(name: str, value: Any) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Field '{name}' is required")
    if not isinstance(value, str):
        raise ValidationError(f"Field '{name}' must be a string")
    return value.strip()


def _parse_age(value: Any) -> int:
    if value is None or value == "":
        raise ValidationError("Age is required")
    if isinstance(value, bool):
        raise ValidationError("Age must be an integer")
    if isinstance(value, str):
        value = value.strip()
        if not value.lstrip("-").isdigit():
            raise ValidationError("Age must be an integer")
        value = int(value)
    elif isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise ValidationError("Age must be an integer")
    if value < 0:
        raise ValidationError("Age cannot be negative")
    return value


def _parse_last_seen(value: Any, now: datetime) -> datetime:
    if value is None or value == "":
        raise ValidationError("Last seen date is required")
    last_seen = parse_datetime(value)
    if last_seen > now:
        raise ValidationError("Last seen date cannot be in the future")
    return last_seen


def _parse_email(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Contact email is required")
    email = value.strip()
    if len(email) > MAX_EMAIL_LENGTH or not EMAIL_PATTERN.match(email):
        raise ValidationError("Please add a valid email")
    return email


def _parse_reward(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, bool):
        raise ValidationError("Reward must be a number")
    try:
        reward = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError("Reward must be a number") from None
    if not reward.is_finite():
        raise ValidationError("Reward must be a finite number")
    if reward < 0:
        raise ValidationError("Reward cannot be negative")
    return reward
