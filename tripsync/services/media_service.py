"""Local storage for uploaded profile and group images."""
from __future__ import annotations

import logging
from pathlib import Path
from uuid import UUID, uuid4

from fastapi import HTTPException, UploadFile, status

from ..config import get_settings

logger = logging.getLogger(__name__)

MEDIA_URL_PREFIX = "/media"
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}
MAX_IMAGE_BYTES = 5 * 1024 * 1024


def media_root() -> Path:
    return Path(get_settings().media_root)


def read_image(upload: UploadFile) -> bytes:
    """Check an uploaded image and return its bytes without writing anything."""

    content_type = upload.content_type or ""
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image uploads are allowed.")

    upload.file.seek(0)
    data = upload.file.read()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The uploaded file is empty.")
    if len(data) > MAX_IMAGE_BYTES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The uploaded file is too large.")
    return data


def write_image(data: bytes, filename: str | None, *, folder: str, owner_uuid: UUID) -> str:
    """Write checked image bytes under the media root and return the ``/media/...`` path."""

    extension = Path(filename or "").suffix.lower()
    generated_name = f"{uuid4().hex}{extension}"
    target_dir = media_root() / folder / str(owner_uuid)
    target_dir.mkdir(parents=True, exist_ok=True)
    destination = target_dir / generated_name
    with destination.open("wb") as fh:
        fh.write(data)

    logger.info("Stored %s upload for %s as %s", folder, owner_uuid, generated_name)
    return f"{MEDIA_URL_PREFIX}/{folder}/{owner_uuid}/{generated_name}"


def store_image(upload: UploadFile, *, folder: str, owner_uuid: UUID) -> str:
    """Persist an uploaded image and return its ``/media/...`` relative path."""

    return write_image(read_image(upload), upload.filename, folder=folder, owner_uuid=owner_uuid)


def format_image_url(path: str | None) -> str | None:
    """Return an absolute URL for a stored relative media path."""

    if not path:
        return None
    if path.startswith(("http://", "https://")):
        return path
    base = get_settings().public_base_url.rstrip("/")
    return f"{base}/{path.lstrip('/')}"


__all__ = ["MEDIA_URL_PREFIX", "media_root", "read_image", "write_image", "store_image", "format_image_url"]
