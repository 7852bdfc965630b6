"""Media store interface and a local-directory implementation."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Protocol

from pet_registry.exceptions import StoreError, ValidationError
from pet_registry.models.base import ImageRef

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})


class MediaStore(Protocol):
    """Accept image bytes and return a stable reference to them."""

    def store(self, data: bytes, filename: str | None = None) -> ImageRef: ...


class LocalMediaStore:
    """Write uploaded images into a directory served under ``base_url``.

    Parameters
    ----------
    upload_dir : str | Path
        Directory for stored files (created if missing).
    base_url : str
        URL prefix the directory is served from.
    """

    def __init__(self, upload_dir: str | Path, base_url: str = "/uploads") -> None:
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/")

    def store(self, data: bytes, filename: str | None = None) -> ImageRef:
        if not data:
            raise ValidationError("Image upload is empty")

        suffix = Path(filename).suffix.lower() if filename else ".jpg"
        if suffix not in IMAGE_EXTENSIONS:
            raise ValidationError(f"Unsupported image type: {suffix or 'none'}")

        media_id = uuid.uuid4().hex
        name = f"{media_id}{suffix}"
        try:
            (self.upload_dir / name).write_bytes(data)
        except OSError as e:
            raise StoreError(f"Failed to store image {name}: {e}") from e

        logger.debug("Stored image %s (%d bytes)", name, len(data))
        return ImageRef(url=f"{self.base_url}/{name}", media_id=media_id)
