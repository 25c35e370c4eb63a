"""
Inkpress Backend - Upload Service
==================================

What:  Stores the single cover image attached to a post create/edit request.
How:   Validates size, writes the bytes under a generated temporary name, then
       renames the file to carry the original file's extension so the stored
       path is self-describing for the static file server.
Who:   Called by PostService before the post row is written.
When:  Once per create request; on edit only when a file was actually sent.

Storage Layout:
    uploads/
    ├── 5c1f0e8e0b7a4a0f9d3a2c6b1e4f7a90.jpg
    ├── 9b1e7c2d4f6a48b0a1c3e5f7d9b2c4e6.png
    └── ...

    Stored names never contain user input besides the extension, and each
    upload gets a fresh uuid4 hex, so concurrent uploads cannot collide.

Extension rule:
    Everything after the last "." of the client filename ("photo.final.JPG"
    → "JPG"). A filename without a dot contributes the whole name, and path
    separators are stripped from it first.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import aiofiles.os

from inkpress.config import settings
from inkpress.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# The multipart field the create/edit routes read the attachment from
UPLOAD_FIELD = "file"

# Keeps "<32 hex>.<ext>" well inside filesystem name limits and the cover column
MAX_EXTENSION_LENGTH = 32


class UploadService:
    """
    Manages the upload directory.

    Lifecycle of an uploaded file:
        1. Route reads the multipart part → UploadService.store()
        2. Size check (non-empty, at most MAX_FILE_SIZE)
        3. Bytes written to uploads/<hex> (temporary, extensionless name)
        4. Renamed to uploads/<hex>.<ext>
        5. Relative path "uploads/<hex>.<ext>" returned and saved as post.cover
        6. If the post write then fails: cleanup() removes the file
    """

    def __init__(self, upload_dir: Optional[str] = None, url_prefix: Optional[str] = None):
        """
        Args:
            upload_dir: Override the default upload directory (used in tests).
            url_prefix: Override the public prefix recorded in cover paths.
        """
        self.upload_dir = Path(upload_dir or settings.upload_dir).resolve()
        self.url_prefix = (url_prefix or settings.upload_url_prefix).strip("/")
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("UploadService initialized with upload_dir=%s", self.upload_dir)

    @staticmethod
    def extension_of(filename: str) -> str:
        """Substring after the last '.', or the whole (basename) when there is none."""
        name = filename.replace("\\", "/").rsplit("/", 1)[-1]
        return name.rsplit(".", 1)[-1]

    def validate_size(self, actual_size: int, content_length: Optional[int] = None) -> None:
        """
        Reject empty and oversized uploads.

        Raises:
            ValidationError with human-readable size limit message
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field=UPLOAD_FIELD,
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field=UPLOAD_FIELD)

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field=UPLOAD_FIELD,
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def checked_extension(self, filename: str) -> str:
        """
        Extension of the client filename, rejected when it could not be part
        of a stored file name.

        Raises:
            ValidationError: longer than MAX_EXTENSION_LENGTH
        """
        extension = self.extension_of(filename)
        if len(extension) > MAX_EXTENSION_LENGTH:
            raise ValidationError(
                message=f"File extension must be at most {MAX_EXTENSION_LENGTH} characters.",
                field=UPLOAD_FIELD,
                context={"extension_length": len(extension)},
            )
        return extension

    def _generate_temp_path(self) -> Path:
        return self.upload_dir / uuid.uuid4().hex

    async def store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Validate and persist an upload.

        Returns:
            Tuple of (absolute_path, cover_path) where cover_path is the
            relative "uploads/<hex>.<ext>" value stored on the post.

        Raises:
            ValidationError: empty or oversized file, or unusable extension
            FileStorageError: write or rename failed
        """
        self.validate_size(len(content), content_length)
        extension = self.checked_extension(filename)

        temp_path = self._generate_temp_path()
        final_path = temp_path.with_name(f"{temp_path.name}.{extension}")

        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(content)
            await aiofiles.os.rename(temp_path, final_path)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", final_path, str(e))
            await self.cleanup(str(temp_path))
            raise FileStorageError(
                message="Failed to save uploaded file. Please try again.",
                context={"path": str(final_path), "os_error": str(e)},
            )

        cover_path = f"{self.url_prefix}/{final_path.name}"
        logger.info("Upload stored: %s (%d bytes)", cover_path, len(content))
        return str(final_path), cover_path

    async def cleanup(self, file_path: str) -> None:
        """
        Remove a stored file (best-effort).

        When:    A post write fails after its cover was stored.
        Missing files are ignored; other OS errors are logged, not raised.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))


# ── Singleton Instance ────────────────────────────────────────────────────
upload_service = UploadService()
