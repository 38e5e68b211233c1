"""
Object storage for uploaded images.

Files are written under ``settings.UPLOAD_DIR`` and served by the static
mount at ``settings.STATIC_URL_PREFIX``.
"""
from abc import ABC, abstractmethod
from typing import Optional
import logging
import os
import uuid
from app.core.config import settings
from app.core.errors import UploadError

logger = logging.getLogger(__name__)


class ObjectStorage(ABC):
    @abstractmethod
    def upload(self, content: bytes, path: str) -> str:
        """Store content at path and return its public URL."""

    @abstractmethod
    def open(self, url: str) -> Optional[bytes]:
        """Return stored bytes for a public URL this storage issued, else None."""


class LocalObjectStorage(ObjectStorage):
    """Stores files on the local filesystem."""

    def __init__(self, root: str = None, url_prefix: str = None):
        self.root = root or settings.UPLOAD_DIR
        self.url_prefix = (url_prefix or settings.STATIC_URL_PREFIX).rstrip("/")

    def _resolve(self, path: str) -> str:
        full_path = os.path.abspath(os.path.join(self.root, path))
        if not full_path.startswith(os.path.abspath(self.root) + os.sep):
            raise UploadError(f"Invalid storage path: {path}", operation="Upload")
        return full_path

    def upload(self, content: bytes, path: str) -> str:
        full_path = self._resolve(path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "wb") as buffer:
            buffer.write(content)
        logger.debug(f"Stored {len(content)} bytes at {full_path}")
        return f"{self.url_prefix}/{path}"

    def open(self, url: str) -> Optional[bytes]:
        if not url.startswith(self.url_prefix + "/"):
            return None
        full_path = self._resolve(url[len(self.url_prefix) + 1:])
        if not os.path.exists(full_path):
            return None
        with open(full_path, "rb") as f:
            return f.read()


def build_upload_path(folder: str, filename: str) -> str:
    """Unique storage path like ``gallery/12/<uuid>.jpg``."""
    file_ext = os.path.splitext(filename or "")[1].lower()
    return f"{folder}/{uuid.uuid4()}{file_ext}"


def validate_image(filename: str, content_type: str, size: int) -> None:
    """Reject files that are not allowed images or are too large."""
    if content_type not in settings.ALLOWED_IMAGE_TYPES:
        raise UploadError(f"Invalid file type for {filename}: {content_type}", operation="Upload")
    if size > settings.MAX_UPLOAD_SIZE:
        raise UploadError(f"{filename} exceeds the {settings.MAX_UPLOAD_SIZE} byte limit", operation="Upload")
    if size == 0:
        raise UploadError(f"{filename} is empty", operation="Upload")
