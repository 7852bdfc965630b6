"""JSON file snapshot of the record store."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable

from pet_registry.exceptions import StoreError, ValidationError
from pet_registry.models.pet import PetRecord
from pet_registry.sinks.serialization import record_from_dict, record_to_dict

logger = logging.getLogger(__name__)


class JsonSnapshotSink:
    """Persist pet records as a single JSON array."""

    def __init__(self, path: str | Path, pretty: bool = False) -> None:
        """Initialize JSON snapshot sink.

        Parameters
        ----------
        path : str | Path
            Snapshot file location; parent directories are created.
        pretty : bool
            Pretty-print JSON output.
        """
        self.path = Path(path)
        self.pretty = pretty

    def exists(self) -> bool:
        return self.path.exists()

    def write_records(self, records: Iterable[PetRecord]) -> int:
        """Atomically replace the snapshot with ``records``.

        Returns
        -------
        int
            Number of records written.
        """
        data = [record_to_dict(record) for record in records]
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                else:
                    json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Failed to write snapshot {self.path}: {e}") from e

        logger.info("Wrote %d records to %s", len(data), self.path)
        return len(data)

    def read_records(self) -> list[PetRecord]:
        """Load records from the snapshot; a missing file yields none."""
        if not self.path.exists():
            return []
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return [record_from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError, ArithmeticError, ValidationError) as e:
            raise StoreError(f"Failed to read snapshot {self.path}: {e}") from e
