# images.py — Business image files on local disk
import os
import uuid
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from errors import ImageTooLarge, InvalidImageType

logger = logging.getLogger("taskhub.images")

# Storage directory (configurable via env)
UPLOAD_DIR = os.getenv("BUSINESS_UPLOAD_DIR", "uploads/businesses")
MAX_IMAGE_BYTES = 5 * 1024 * 1024

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
}
ALLOWED_SUFFIXES = {".jpg", ".jpeg", ".png", ".gif"}
READ_CHUNK_BYTES = 64 * 1024


@dataclass
class ImageUpload:
    filename: Optional[str]
    content_type: Optional[str]
    data: bytes


class ImageStore:
    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or UPLOAD_DIR)

    def validate(self, upload: ImageUpload) -> None:
        if upload.content_type not in ALLOWED_IMAGE_TYPES:
            raise InvalidImageType()
        suffix = Path(upload.filename or "").suffix.lower()
        if suffix and suffix not in ALLOWED_SUFFIXES:
            raise InvalidImageType()
        if len(upload.data) > MAX_IMAGE_BYTES:
            raise ImageTooLarge()

    def save(self, upload: ImageUpload) -> str:
        """Write the file under a fresh uuid name with the extension of its image type"""
        self.validate(upload)
        name = f"{uuid.uuid4()}{ALLOWED_IMAGE_TYPES[upload.content_type]}"
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / name).write_bytes(upload.data)
        logger.info(f"Stored image {name} ({len(upload.data)} bytes)")
        return name

    def path_for(self, name: str) -> Path:
        # Stored names never contain directories
        return self.root / Path(name).name

    def delete(self, name: Optional[str]) -> None:
        if not name:
            return
        path = self.path_for(name)
        if path.exists():
            path.unlink()
            logger.info(f"Removed image {name}")
        else:
            logger.warning(f"Image {name} already gone")
