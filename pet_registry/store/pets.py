"""Pet record store with spatial and attribute indexes."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

from pet_registry.exceptions import RecordNotFoundError, StoreError, UnauthorizedError
from pet_registry.geo.index import GeoCellIndex
from pet_registry.models.enums import PetStatus
from pet_registry.models.pet import PetPatch, PetRecord
from pet_registry.store.indexes import AttributeIndex

if TYPE_CHECKING:
    from pet_registry.search import QuerySpec
    from pet_registry.sinks.json_file import JsonSnapshotSink

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PetRecordStore:
    """In-memory store of pet records.

    The primary table, the geocell spatial index and the attribute index
    change together under one short commit lock, and the id becomes
    readable only once all three hold the record. Updates to the same
    record are serialized by a per-record lock, so a read-check-write
    (ownership, lifecycle guard, write) never interleaves with another
    writer of that record while other records stay writable.

    Parameters
    ----------
    cell_size_deg : float
        Spatial index cell size in degrees.
    snapshot : JsonSnapshotSink | None
        Where :meth:`open` loads from and :meth:`close` saves to.
    clock : Callable[[], datetime]
        Source of ``updated_at`` timestamps.
    """

    def __init__(
        self,
        cell_size_deg: float = 0.25,
        snapshot: JsonSnapshotSink | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._records: dict[str, PetRecord] = {}
        self._spatial = GeoCellIndex(cell_size_deg)
        self._attributes = AttributeIndex()
        self._lock = threading.Lock()
        self._record_locks: dict[str, threading.Lock] = {}
        self._record_locks_guard = threading.Lock()
        self._snapshot = snapshot
        self._clock = clock
        self._is_open = False

    # Lifecycle
    def open(self) -> "PetRecordStore":
        """Load the snapshot (if any) and rebuild the indexes."""
        if self._is_open:
            return self
        if self._snapshot is not None:
            records = self._snapshot.read_records()
            with self._lock:
                self._records.clear()
                self._spatial.clear()
                self._attributes.clear()
                for record in records:
                    self._spatial.add(record.pet_id, record.location)
                    self._attributes.add(record.pet_id, record)
                    self._records[record.pet_id] = record
            logger.info("Loaded %d records and rebuilt indexes", len(records))
        self._is_open = True
        return self

    def close(self) -> None:
        """Persist records to the snapshot (if any)."""
        if not self._is_open:
            return
        if self._snapshot is not None:
            self._snapshot.write_records(self.records())
        self._is_open = False

    def __enter__(self) -> "PetRecordStore":
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._records)

    # Writes
    def insert(self, record: PetRecord) -> str:
        """Assign an id and publish ``record`` to the table and both indexes.

        Returns
        -------
        str
            The new record id.

        Raises
        ------
        StoreError
            If the record is not geocoded or an index rejects it; nothing
            is left visible in that case.
        """
        if record.location is None or record.address is None:
            raise StoreError("Record has no resolved location")

        pet_id = uuid.uuid4().hex
        stored = replace(record, pet_id=pet_id)

        with self._lock:
            try:
                self._spatial.add(pet_id, stored.location)
                self._attributes.add(pet_id, stored)
            except Exception as e:
                self._spatial.discard(pet_id)
                self._attributes.discard(pet_id)
                raise StoreError(f"Failed to index record: {e}") from e
            self._records[pet_id] = stored

        logger.debug("Inserted record %s", pet_id)
        return pet_id

    def update_fields(
        self,
        pet_id: str,
        patch: PetPatch,
        expected_owner: str,
        guard: Callable[[PetRecord], None] | None = None,
    ) -> PetRecord:
        """Apply ``patch`` to a record owned by ``expected_owner``.

        Parameters
        ----------
        pet_id : str
            Record to update.
        patch : PetPatch
            Mutable-field changes.
        expected_owner : str
            Identity that must own the record.
        guard : Callable[[PetRecord], None] | None
            Check run against the current version while the record is
            locked; raising aborts the update.

        Returns
        -------
        PetRecord
            The new record version.
        """
        with self._record_lock(pet_id):
            current = self.get_by_id(pet_id)
            if current.owner != expected_owner:
                raise UnauthorizedError(f"Not authorized to modify record {pet_id}")
            if guard is not None:
                guard(current)

            updated = patch.apply_to(current, updated_at=self._clock())
            with self._lock:
                if AttributeIndex.key_for(updated) != AttributeIndex.key_for(current):
                    self._attributes.add(pet_id, updated)
                self._records[pet_id] = updated

        logger.debug("Updated record %s fields=%s", pet_id, sorted(patch.changes()))
        return updated

    # Reads
    def get_by_id(self, pet_id: str) -> PetRecord:
        with self._lock:
            record = self._records.get(pet_id)
        if record is None:
            raise RecordNotFoundError(f"Pet {pet_id} not found")
        return record

    def query(self, spec: QuerySpec) -> list[PetRecord]:
        """Execute a planned query.

        Spatial queries scan the geocell index and apply species/status
        as post-filters; attribute queries go through the attribute
        index. Results are newest first, or nearest first for spatial
        queries that ask for it.
        """
        with self._lock:
            if spec.is_spatial:
                hits = [
                    (self._records[pet_id], angle)
                    for pet_id, angle in self._spatial.within(spec.center, spec.radius)
                ]
            elif spec.species is None and spec.status is None and spec.city is None:
                hits = [(record, 0.0) for record in self._records.values()]
            else:
                ids = self._attributes.lookup(spec.species, spec.status, spec.city)
                hits = [(self._records[pet_id], 0.0) for pet_id in ids]

        if spec.is_spatial:
            hits = [
                (record, angle)
                for record, angle in hits
                if (spec.species is None or record.species == spec.species)
                and (spec.status is None or record.status == spec.status)
            ]
            if spec.nearest_first:
                hits.sort(key=lambda hit: (hit[1], hit[0].pet_id))
                return [record for record, _ in hits]

        hits.sort(key=lambda hit: (hit[0].created_at, hit[0].pet_id), reverse=True)
        logger.debug("Query %s matched %d records", spec.kind.value, len(hits))
        return [record for record, _ in hits]

    def records(self) -> list[PetRecord]:
        """Consistent copy of every stored record."""
        with self._lock:
            return list(self._records.values())

    def is_indexed(self, pet_id: str) -> bool:
        """Whether ``pet_id`` is present in both indexes."""
        with self._lock:
            return pet_id in self._spatial and pet_id in self._attributes

    def summary(self) -> dict[str, int]:
        """Return record counts per status."""
        with self._lock:
            counts = {status.value: 0 for status in PetStatus}
            for record in self._records.values():
                counts[record.status.value] += 1
            return {
                "total": len(self._records),
                **counts,
                "indexed_cells": self._spatial.populated_cells,
            }

    def _record_lock(self, pet_id: str) -> threading.Lock:
        # Locks are only created for stored ids; records are never removed
        with self._lock:
            if pet_id not in self._records:
                raise RecordNotFoundError(f"Pet {pet_id} not found")
        with self._record_locks_guard:
            return self._record_locks.setdefault(pet_id, threading.Lock())
