"""Image upload handling for company/currency logos and team pictures.

Accepted formats: JPEG, PNG and SVG, checked by both file extension and
content type. Raster images are additionally opened with Pillow so a renamed
non-image file is rejected. Files are written to the upload directory under a
random name and served statically from ``/uploads``.
"""

from __future__ import annotations

import io
import secrets
from pathlib import Path

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from cashcrash.core.config import settings
from cashcrash.core.exceptions import BadRequestError
from cashcrash.core.logging import get_logger


logger = get_logger("services.uploads")


ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".svg"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/svg+xml"}
RASTER_FORMATS = {".jpeg": "JPEG", ".jpg": "JPEG", ".png": "PNG"}

PUBLIC_PREFIX = "/uploads"


def upload_dir() -> Path:
    path = Path(settings.resolved_upload_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _verify_raster(data: bytes, expected_format: str) -> None:
    try:
        with Image.open(io.BytesIO(data)) as img:
            detected = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise BadRequestError(message="Only image files are allowed", error_code="INVALID_IMAGE") from e
    if detected != expected_format:
        raise BadRequestError(message="Only image files are allowed", error_code="INVALID_IMAGE")


def validate_image(filename: str, content_type: str | None, data: bytes) -> str:
    """Validate an upload and return its normalised extension."""
    extension = Path(filename or "").suffix.lower()
    if extension not in ALLOWED_EXTENSIONS or (content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
        raise BadRequestError(message="Only image files are allowed", error_code="INVALID_IMAGE")
    if len(data) > settings.max_upload_bytes:
        raise BadRequestError(
            message=f"File exceeds the {settings.max_upload_bytes // (1024 * 1024)}MB limit",
            error_code="FILE_TOO_LARGE",
        )
    if not data:
        raise BadRequestError(message="Uploaded file is empty", error_code="INVALID_IMAGE")
    if extension in RASTER_FORMATS:
        _verify_raster(data, RASTER_FORMATS[extension])
    return extension


async def save_image(upload: UploadFile) -> str:
    """Store an uploaded image and return its public URL."""
    # One byte past the limit marks an oversize file
    data = await upload.read(settings.max_upload_bytes + 1)
    extension = validate_image(upload.filename or "", upload.content_type, data)

    name = f"{secrets.token_hex(16)}{extension}"
    (upload_dir() / name).write_bytes(data)

    logger.info(f"Stored upload {upload.filename} as {name} ({len(data) / 1024:.1f}KB)")
    return f"{PUBLIC_PREFIX}/{name}"


async def save_optional_image(upload: UploadFile | None) -> str | None:
    """Like :func:`save_image` but passes through missing or empty file fields."""
    if upload is None or not upload.filename:
        return None
    return await save_image(upload)
