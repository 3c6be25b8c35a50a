"""Image upload storage for inspection attachments."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import InputValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

_CHUNK_SIZE = 64 * 1024


def validate_image_filename(filename: str | None) -> str:
    """Return the lower-cased extension, or raise if it is not an image type."""
    ext = Path(filename or "").suffix.lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise InputValidationError.for_field(
            "image",
            f"Image must be one of: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}",
        )
    return ext


async def save_image(file: UploadFile) -> str:
    """Stream an uploaded image to ``UPLOAD_DIR`` and return its stored path."""
    ext = validate_image_filename(file.filename)
    await aiofiles.os.makedirs(settings.UPLOAD_DIR, exist_ok=True)

    unique_filename = f"{os.urandom(16).hex()}{ext}"
    file_path = os.path.join(settings.UPLOAD_DIR, unique_filename)

    written = 0
    async with aiofiles.open(file_path, "wb") as out:
        while chunk := await file.read(_CHUNK_SIZE):
            written += len(chunk)
            if written > settings.max_upload_bytes:
                break
            await out.write(chunk)

    if written > settings.max_upload_bytes:
        await aiofiles.os.remove(file_path)
        raise InputValidationError.for_field(
            "image", f"Image must not exceed {settings.MAX_UPLOAD_SIZE_MB} MB"
        )

    logger.info("Stored upload %s (%d bytes)", file_path, written)
    return file_path


async def remove_image(file_path: str | None) -> None:
    """Delete a previously stored image. A file that is already gone is ignored."""
    if not file_path:
        return
    try:
        await aiofiles.os.remove(file_path)
    except FileNotFoundError:
        logger.warning("Image %s already removed", file_path)
    else:
        logger.info("Removed image %s", file_path)
