"""
Notes API - Image Storage Service
=================================

What:  Validates, stores and removes note images on the local file system.
How:   Images are written with a generated name under
       <storage_root>/<upload_dir>/ and notes keep the path relative to
       storage_root (uploads/notes/note-<uuid>.png). All later operations
       resolve that relative path back inside storage_root.
Who:   NoteService (create/update/delete) and the /uploads file route.

Upload checks, cheapest first:
    1. Extension in the allowed set
    2. Declared content type is one of the allowed image types
    3. Not empty, not larger than max_file_size
    4. Generated file name, so nothing user-supplied reaches the path

Removal semantics:
    remove()  - for deleting a note's own image: a missing file is fine, any
                other OS error raises FileStorageError (fails the request)
    cleanup() - for undoing a file this request just stored: best-effort,
                failures are only logged
"""

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles

from notes_api.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


@dataclass(frozen=True)
class StoredFile:
    absolute_path: Path
    relative_path: str


class FileService:
    """
    Manages the lifecycle of uploaded note images.

    Directory Structure:
        <storage_root>/
        └── uploads/
            └── notes/
                ├── note-1b9d6bcd-bbfd-4b2d-9b5d-ab8dfbbd4bed.png
                └── note-6ec0bd7f-11c0-43da-975e-2a8ad9ebae0b.jpg
    """

    def __init__(self, storage_root: str, upload_dir: str, max_file_size: int):
        self.storage_root = Path(storage_root).resolve()
        self.upload_dir = upload_dir.strip("/")
        self.max_file_size = max_file_size

    @property
    def upload_path(self) -> Path:
        return self.storage_root / self.upload_dir

    def ensure_upload_dir(self) -> None:
        self.upload_path.mkdir(parents=True, exist_ok=True)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """Return the normalized (lowercase, dotted) extension or raise ValidationError."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext},
            )
        return ext

    def validate_content_type(self, content_type: Optional[str]) -> str:
        """Only images are accepted; the declared type must be a known image type."""
        normalized = (content_type or "").split(";")[0].strip().lower()
        if normalized not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                message="Only images are allowed",
                field="image",
                context={"content_type": normalized},
            )
        return normalized

    def validate_size(self, content: bytes) -> None:
        if not content:
            raise ValidationError(message="Uploaded image is empty", field="image")

        if len(content) > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=(
                    f"File size ({len(content) / (1024 * 1024):.1f}MB) exceeds "
                    f"maximum of {max_mb:.0f}MB."
                ),
                field="image",
                context={"max_size": self.max_file_size, "actual_size": len(content)},
            )

    def validate_upload(self, filename: str, content_type: Optional[str], content: bytes) -> str:
        """Run every upload check; returns the extension to store the file under."""
        ext = self.validate_extension(filename)
        self.validate_content_type(content_type)
        self.validate_size(content)
        return ext

    # ── Storage ───────────────────────────────────────────────────────────

    def _generate_storage_path(self, extension: str) -> StoredFile:
        name = f"note-{uuid.uuid4()}{extension}"
        relative_path = f"{self.upload_dir}/{name}"
        return StoredFile(
            absolute_path=self.storage_root / relative_path,
            relative_path=relative_path,
        )

    async def store(self, content: bytes, extension: str) -> StoredFile:
        """Write content to a freshly named file. Raises FileStorageError on OS errors."""
        stored = self._generate_storage_path(extension)

        try:
            stored.absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(stored.absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", stored.absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(stored.absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", stored.relative_path, len(content))
        return stored

    async def save_upload(
        self,
        filename: str,
        content_type: Optional[str],
        content: bytes,
    ) -> StoredFile:
        """Validate and store an uploaded image."""
        ext = self.validate_upload(filename, content_type, content)
        return await self.store(content, ext)

    # ── Lookup & Removal ──────────────────────────────────────────────────

    def resolve(self, relative_path: str) -> Path:
        """
        Absolute path for a stored relative path.

        Raises ValidationError if the result would leave storage_root
        (e.g. ../../etc/passwd).
        """
        candidate = (self.storage_root / relative_path).resolve()
        if not candidate.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path", context={"path": relative_path})
        return candidate

    def locate(self, relative_path: str) -> Path:
        """
        Absolute path of an existing stored image, for serving it.

        Only files inside the upload directory are served; anything else,
        including missing files, raises NotFoundError.
        """
        path = self.resolve(relative_path)
        if not path.is_relative_to(self.upload_path.resolve()) or not path.is_file():
            raise NotFoundError(resource="file", resource_id=relative_path)
        return path

    async def remove(self, relative_path: str) -> bool:
        """
        Delete a stored image if it exists.

        Returns True if a file was deleted, False if there was nothing to
        delete. Any other failure raises FileStorageError.
        """
        path = self.resolve(relative_path)
        if not path.exists():
            logger.debug("Image already gone: %s", relative_path)
            return False

        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error("Failed to delete image %s: %s", relative_path, str(e))
            raise FileStorageError(
                message="Failed to delete the note image.",
                context={"path": relative_path, "os_error": str(e)},
            )

        logger.info("Image deleted: %s", relative_path)
        return True

    async def cleanup(self, relative_path: str) -> None:
        """Best-effort removal: failures are logged, never raised."""
        try:
            await self.remove(relative_path)
        except Exception as e:
            logger.warning("Failed to clean up file %s: %s", relative_path, str(e))
