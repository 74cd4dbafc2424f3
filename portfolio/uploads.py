"""
Upload gating and object naming for admin image uploads.
"""

from __future__ import annotations

import base64
import binascii
import logging
import threading
import time
from pathlib import PurePosixPath
from typing import Optional

from portfolio.errors import (
    FileTooLargeError,
    InvalidFileTypeError,
    InvalidFolderError,
    ValidationFailedError,
)
from portfolio.storage import StorageClient
from shared.constants import (
    ALLOWED_IMAGE_MIME_TYPES,
    ALLOWED_UPLOAD_FOLDERS,
    DEFAULT_UPLOAD_FOLDER,
    MAX_UPLOAD_BYTES,
)

logger = logging.getLogger(__name__)

_prefix_lock = threading.Lock()
_last_prefix = 0


def next_object_prefix() -> int:
    """Nanosecond timestamp, strictly increasing within the process."""
    global _last_prefix
    with _prefix_lock:
        _last_prefix = max(time.time_ns(), _last_prefix + 1)
        return _last_prefix


def safe_file_name(file_name: str) -> str:
    return PurePosixPath(file_name.replace("\\", "/")).name.strip()


def decode_file_data(file_data: str) -> bytes:
    # Accept data URLs as produced by FileReader.readAsDataURL.
    if file_data.startswith("data:") and "," in file_data:
        file_data = file_data.split(",", 1)[1]
    try:
        return base64.b64decode(file_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationFailedError(
            {"fileData": "File data must be base64 encoded"}
        ) from e


def check_upload(data: bytes, mime_type: str, folder: str) -> None:
    if mime_type not in ALLOWED_IMAGE_MIME_TYPES:
        raise InvalidFileTypeError()
    if len(data) > MAX_UPLOAD_BYTES:
        raise FileTooLargeError()
    if folder not in ALLOWED_UPLOAD_FOLDERS:
        raise InvalidFolderError()


class ImageUploader:
    def __init__(self, storage: StorageClient):
        self._storage = storage

    def upload(
        self,
        *,
        file_data: str,
        file_name: str,
        mime_type: str,
        folder: Optional[str] = None,
    ) -> str:
        """Validates and stores an image, returning its public URL."""
        name = safe_file_name(file_name or "")
        missing = {}
        if not file_data:
            missing["fileData"] = "File data is required"
        if not name:
            missing["fileName"] = "File name is required"
        if not mime_type:
            missing["mimeType"] = "MIME type is required"
        if missing:
            raise ValidationFailedError(missing, "Missing required fields")

        if mime_type not in ALLOWED_IMAGE_MIME_TYPES:
            raise InvalidFileTypeError()
        data = decode_file_data(file_data)
        target = folder or DEFAULT_UPLOAD_FOLDER
        check_upload(data, mime_type, target)

        path = f"{target}/{next_object_prefix()}-{name}"
        url = self._storage.upload_bytes(path, data, mime_type)
        logger.info("Uploaded %s (%d bytes, %s)", path, len(data), mime_type)
        return url
