"""Question image upload and removal."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Optional

from ..gateway import Backend
from .results import ActionError, action

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})
DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024


class ImageRejected(ActionError):
    pass


def _format_limit(max_bytes: int) -> str:
    if max_bytes >= 1024 * 1024 and max_bytes % (1024 * 1024) == 0:
        return f"{max_bytes // (1024 * 1024)}MB"
    return f"{max_bytes} bytes"


def validate_image(
    filename: Optional[str], content_type: Optional[str], size: int, max_bytes: int
) -> None:
    if not filename:
        raise ImageRejected("No file provided")
    if (content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
        raise ImageRejected("Invalid file type. Only JPG, PNG, GIF, and WebP are allowed.")
    if size > max_bytes:
        raise ImageRejected(f"File size exceeds {_format_limit(max_bytes)} limit")


@action("upload_image", status=HTTPStatus.CREATED)
def upload_image(
    backend: Backend,
    filename: Optional[str],
    data: bytes,
    content_type: Optional[str],
    *,
    max_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
):
    validate_image(filename, content_type, len(data), max_bytes)
    stored = backend.objects.put_object(
        backend.images_bucket, data, filename=filename, content_type=content_type.lower()
    )
    logger.info("Image uploaded", extra={"image_id": stored.id, "size": stored.size})
    return {"fileId": stored.id, "url": backend.objects.object_url(backend.images_bucket, stored.id)}


@action("delete_image", not_found="Image not found")
def delete_image(backend: Backend, image_id: str):
    backend.objects.delete_object(backend.images_bucket, image_id)
    return {"fileId": image_id}
