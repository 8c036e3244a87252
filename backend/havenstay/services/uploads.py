"""Listing image uploads — saved to ``settings.upload_dir``, referenced by URL path."""

import logging
import uuid
from pathlib import Path

from fastapi import UploadFile

from havenstay.config import settings
from havenstay.errors import InvalidInput

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}
UPLOAD_URL_PREFIX = "/uploads"

_CHUNK_SIZE = 64 * 1024


def _suffix(upload: UploadFile) -> str:
    return Path(upload.filename or "").suffix.lower()


def validate_uploads(files: list[UploadFile]) -> None:
    if len(files) > settings.max_upload_images:
        raise InvalidInput.for_field("images", f"At most {settings.max_upload_images} images per listing")
    for upload in files:
        content_type = upload.content_type or ""
        if not content_type.startswith("image/") or _suffix(upload) not in ALLOWED_EXTENSIONS:
            raise InvalidInput.for_field("images", f"{upload.filename} is not a supported image")


async def save_images(files: list[UploadFile], upload_dir: str | None = None) -> list[str]:
    """Write uploads to disk under random names and return their URL paths.

    Partially written files are removed if any image exceeds the size limit.
    """
    validate_uploads(files)
    target = Path(upload_dir or settings.upload_dir)
    target.mkdir(parents=True, exist_ok=True)

    saved: list[Path] = []
    try:
        for upload in files:
            path = target / f"{uuid.uuid4().hex}{_suffix(upload)}"
            saved.append(path)
            written = 0
            with path.open("wb") as out:
                while chunk := await upload.read(_CHUNK_SIZE):
                    written += len(chunk)
                    if written > settings.max_upload_bytes:
                        raise InvalidInput.for_field(
                            "images",
                            f"{upload.filename} exceeds {settings.max_upload_bytes // (1024 * 1024)}MB",
                        )
                    out.write(chunk)
    except InvalidInput:
        for path in saved:
            path.unlink(missing_ok=True)
        raise

    logger.info("Stored %d listing images in %s", len(saved), target)
    return [f"{UPLOAD_URL_PREFIX}/{path.name}" for path in saved]
