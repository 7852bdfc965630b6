"""Registry service: the public operations of the pet registry.

Writes run as an explicit pipeline: validate, geocode, then commit to
the store. Geocoding finishes before the store is touched, so a slow or
failing provider never holds a store lock and never leaves a partial
record behind.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping

from pet_registry.config import RegistryConfig
from pet_registry.exceptions import (
    ConfigurationError,
    GeocodeError,
    UnauthorizedError,
    ValidationError,
)
from pet_registry.geocoding import GeocodingNormalizer, Geocoder, create_geocoder
from pet_registry.lifecycle import INITIAL_STATUS, StatusLifecycle
from pet_registry.media import LocalMediaStore, MediaStore
from pet_registry.models.base import ImageRef
from pet_registry.models.enums import PetStatus
from pet_registry.models.pet import PetPatch, PetRecord
from pet_registry.search import SearchCriteria, SearchPlanner
from pet_registry.sinks.json_file import JsonSnapshotSink
from pet_registry.store.pets import PetRecordStore
from pet_registry.validation import parse_patch, parse_status, validate_report

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RegistryService:
    """Report, find, search and update missing-pet records.

    Parameters
    ----------
    store : PetRecordStore
        Record store; its lifecycle (open/close) belongs to the caller.
    normalizer : GeocodingNormalizer
        Address resolution for new reports.
    planner : SearchPlanner | None
        Search planner (default: 100 km maximum radius).
    lifecycle : StatusLifecycle | None
        Status transition rules.
    media_store : MediaStore | None
        Destination for :meth:`upload_images`.
    max_images : int
        Maximum images per record.
    clock : Callable[[], datetime]
        Source of creation timestamps and the "now" for validation.
    """

    def __init__(
        self,
        store: PetRecordStore,
        normalizer: GeocodingNormalizer,
        planner: SearchPlanner | None = None,
        lifecycle: StatusLifecycle | None = None,
        media_store: MediaStore | None = None,
        max_images: int = 5,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.normalizer = normalizer
        self.planner = planner or SearchPlanner()
        self.lifecycle = lifecycle or StatusLifecycle()
        self.media_store = media_store
        self.max_images = max_images
        self._clock = clock

    def report(
        self,
        identity: str,
        pet_data: Mapping[str, Any],
        raw_address: str,
        images: Iterable[ImageRef | Mapping[str, Any]] = (),
    ) -> PetRecord:
        """Report a missing pet.

        Parameters
        ----------
        identity : str
            Authenticated caller; becomes the record owner.
        pet_data : Mapping[str, Any]
            Descriptive and contact fields.
        raw_address : str
            Where the pet was last seen, as free text.
        images : Iterable[ImageRef | Mapping]
            Image references from the media store, in upload order.

        Returns
        -------
        PetRecord
            The stored record, status ``missing``.

        Raises
        ------
        ValidationError
            If required fields or the owner identity are missing or malformed.
        GeocodeError
            If the address cannot be resolved; nothing is stored.
        """
        if not isinstance(identity, str) or not identity.strip():
            raise ValidationError("Owner identity is required")
        now = self._clock()
        details = validate_report(pet_data, images, self.max_images, now)

        try:
            address, location = self.normalizer.normalize(raw_address)
        except GeocodeError as e:
            logger.warning("Report rejected, geocoding failed: %s", e)
            raise

        record = PetRecord(
            pet_id=None,
            name=details.name,
            species=details.species,
            breed=details.breed,
            age=details.age,
            color=details.color,
            description=details.description,
            last_seen=details.last_seen,
            address=address,
            location=location,
            owner=identity,
            contact_phone=details.contact_phone,
            contact_email=details.contact_email,
            created_at=now,
            updated_at=now,
            images=details.images,
            status=INITIAL_STATUS,
            reward=details.reward,
        )
        pet_id = self.store.insert(record)
        logger.info(
            "Reported %s %s in %s",
            record.species.value,
            pet_id,
            address.city or address.formatted,
            extra={"extra": {"pet_id": pet_id, "owner": identity}},
        )
        return self.store.get_by_id(pet_id)

    def find(self, pet_id: str) -> PetRecord:
        """Fetch a record by id; raises ``RecordNotFoundError``."""
        return self.store.get_by_id(pet_id)

    get_by_id = find

    def search(self, criteria: SearchCriteria | Mapping[str, Any] | None = None) -> list[PetRecord]:
        """Search records by species, status, city and/or proximity.

        ``criteria`` may be a :class:`SearchCriteria` or raw query
        parameters (see :meth:`SearchCriteria.from_params`).
        """
        if criteria is None:
            criteria = SearchCriteria()
        elif not isinstance(criteria, SearchCriteria):
            criteria = SearchCriteria.from_params(criteria)
        spec = self.planner.plan(criteria)
        return self.store.query(spec)

    def update_status(self, identity: str, pet_id: str, target_status: PetStatus | str) -> PetRecord:
        """Move a record along its lifecycle.

        Raises
        ------
        RecordNotFoundError
            If the record does not exist.
        UnauthorizedError
            If ``identity`` is not the owner.
        InvalidTransitionError
            If the lifecycle forbids the change.
        """
        self._require_identity(identity)
        target = parse_status(target_status)

        previous: list[PetStatus] = []

        def guard(current: PetRecord) -> None:
            self.lifecycle.check(current, identity, target)
            previous.append(current.status)

        updated = self.store.update_fields(
            pet_id, PetPatch(status=target), expected_owner=identity, guard=guard
        )
        logger.info(
            "Pet %s status %s -> %s",
            pet_id,
            previous[0].value,
            updated.status.value,
            extra={"extra": {"pet_id": pet_id, "status": updated.status.value}},
        )
        return updated

    def update_fields(
        self,
        identity: str,
        pet_id: str,
        patch: PetPatch | Mapping[str, Any],
    ) -> PetRecord:
        """Change descriptive or contact fields of an owned record.

        Status changes go through :meth:`update_status`.
        """
        self._require_identity(identity)
        if not isinstance(patch, PetPatch):
            patch = parse_patch(patch, self.max_images, self._clock())
        if patch.status is not None:
            raise ValidationError("Use update_status to change status")
        if patch.is_empty():
            raise ValidationError("Update contains no changes")
        return self.store.update_fields(pet_id, patch, expected_owner=identity)

    def upload_images(self, uploads: Iterable[bytes | tuple[str, bytes]]) -> list[ImageRef]:
        """Store uploaded images and return their references in order.

        Each upload is raw bytes or a ``(filename, bytes)`` pair.
        """
        if self.media_store is None:
            raise ConfigurationError("No media store configured")
        uploads = list(uploads)
        if len(uploads) > self.max_images:
            raise ValidationError(f"At most {self.max_images} images are allowed")

        refs = []
        for upload in uploads:
            if isinstance(upload, tuple):
                filename, data = upload
                refs.append(self.media_store.store(data, filename))
            else:
                refs.append(self.media_store.store(upload))
        return refs

    def health(self) -> dict[str, Any]:
        """Liveness report with record counts."""
        return {
            "status": "OK",
            "timestamp": self._clock().isoformat(),
            "records": self.store.summary(),
        }

    @staticmethod
    def _require_identity(identity: str) -> None:
        if not isinstance(identity, str) or not identity.strip():
            raise UnauthorizedError("An authenticated identity is required")


def build_service(
    config: RegistryConfig,
    geocoder: Geocoder | None = None,
    store: PetRecordStore | None = None,
) -> RegistryService:
    """Wire a :class:`RegistryService` from configuration.

    The returned service's store is not opened; call
    ``service.store.open()`` at startup and ``close()`` on shutdown.
    """
    config.validate()

    if store is None:
        snapshot = None
        if config.store.snapshot_path is not None:
            snapshot = JsonSnapshotSink(config.store.snapshot_path, pretty=config.store.pretty_json)
        store = PetRecordStore(cell_size_deg=config.search.cell_size_deg, snapshot=snapshot)

    return RegistryService(
        store=store,
        normalizer=GeocodingNormalizer(geocoder or create_geocoder(config.geocoder)),
        planner=SearchPlanner(max_radius_km=config.search.max_radius_km),
        media_store=LocalMediaStore(config.media.upload_dir, config.media.base_url),
        max_images=config.media.max_images,
    )
