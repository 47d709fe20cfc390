"""
Notes API - Note Service (Business Logic Orchestrator)
======================================================

What:  Owner-scoped CRUD for notes, including their image files.
Why:   Keeps the pairing of note rows and image files in one place, so a
       failed write never leaves a stored image without its note.
How:   Composes NoteRepository (per-request session) and FileService, and
       commits each write before returning.
Who:   Called by the /api/v1/notes route handlers with the user id set by
       the require_user gate.
When:  Once per /api/v1/notes request.

File/record ordering:
    create  → validate title → store image → insert row → commit
              (insert or commit fails → stored image cleaned up)
    update  → load owned note (404 before anything is written)
              → validate title → store new image → flush → commit
              (flush or commit fails → new image cleaned up, old one kept)
              → remove previous image (best-effort, the row is final)
    delete  → load owned note → remove image → delete row → commit

NoteService holds no per-request state; the session is passed into every
call, so one instance serves all requests.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from slugify import slugify
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.exceptions import DatabaseError, NotFoundError, ValidationError
from notes_api.models.note import TITLE_MAX_LENGTH, TITLE_MIN_LENGTH, Note
from notes_api.repositories import NoteRepository
from notes_api.schemas.note import NoteListResponse, NoteResponse
from notes_api.services.file_service import FileService, StoredFile

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 4

# Why: (page - 1) * limit must fit the database's 64-bit OFFSET/LIMIT.
# Two 31-bit factors stay below 2**62.
MAX_PAGING_VALUE = 2**31 - 1

DUPLICATE_TITLE = "a note with this title already exists"


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded image as read from the multipart request."""

    filename: str
    content_type: Optional[str]
    content: bytes


def coerce_positive_int(value: Any, default: int) -> int:
    """
    Parse a paging parameter.

    Anything that is not a positive integer ("abc", "0", "-2", "1.5", None)
    falls back to `default`, and so does anything above MAX_PAGING_VALUE.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped.isdigit():
            return default
        value = int(stripped)
    if isinstance(value, int) and 0 < value <= MAX_PAGING_VALUE:
        return value
    return default


def validate_title(title: Optional[str]) -> str:
    """Trimmed title, or ValidationError when missing or out of range."""
    if title is None or not title.strip():
        raise ValidationError(message="title is required", field="title")

    title = title.strip()
    if not TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
        raise ValidationError(
            message=(
                f"title must be between {TITLE_MIN_LENGTH} and "
                f"{TITLE_MAX_LENGTH} characters"
            ),
            field="title",
            context={"length": len(title)},
        )
    return title


def make_slug(title: str) -> str:
    """'My Note' -> 'my-note'."""
    return slugify(title, lowercase=True)


def parse_note_id(note_id: str) -> uuid.UUID:
    """A malformed id cannot name any note, so it is reported as not found."""
    try:
        return uuid.UUID(str(note_id))
    except ValueError:
        raise NotFoundError(resource="note", resource_id=str(note_id))


class NoteService:
    """
    Business logic layer for note operations.

    Error Handling Strategy:
        Application exceptions propagate unchanged. A unique-constraint
        violation on flush or commit means the title is taken (ValidationError); any
        other SQLAlchemy error is wrapped in DatabaseError so no driver
        details reach the client.
    """

    def __init__(self, file_service: FileService):
        self.files = file_service

    async def _load_owned(self, db: AsyncSession, user_id: uuid.UUID, note_id: str) -> Note:
        note = await NoteRepository(db).get_owned(parse_note_id(note_id), user_id)
        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return note

    async def _store_image(self, image: Optional[ImageUpload]) -> Optional[StoredFile]:
        if image is None:
            return None
        return await self.files.save_upload(image.filename, image.content_type, image.content)

    async def list_notes(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        page: Any = DEFAULT_PAGE,
        limit: Any = DEFAULT_LIMIT,
    ) -> NoteListResponse:
        """
        One page of the caller's notes, oldest first.

        Query plan:
            SELECT * FROM notes WHERE user_id = :uid
            ORDER BY created_at, id LIMIT :limit OFFSET :offset
            → idx_notes_user_created
        """
        page = coerce_positive_int(page, DEFAULT_PAGE)
        limit = coerce_positive_int(limit, DEFAULT_LIMIT)

        try:
            notes = await NoteRepository(db).list_owned(
                user_id, offset=(page - 1) * limit, limit=limit
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return NoteListResponse(
            total=len(notes),
            page=page,
            data=[NoteResponse.model_validate(note) for note in notes],
        )

    async def get_note(self, db: AsyncSession, user_id: uuid.UUID, note_id: str) -> NoteResponse:
        """Raises NotFoundError when the note is missing or owned by someone else."""
        note = await self._load_owned(db, user_id, note_id)
        return NoteResponse.model_validate(note)

    async def create_note(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        title: Optional[str],
        image: Optional[ImageUpload] = None,
    ) -> NoteResponse:
        """
        Create a note owned by `user_id`.

        Raises:
            ValidationError:  bad title, bad image, or title already taken
            FileStorageError: image could not be written
            DatabaseError:    insert or commit failed for another reason
        """
        title = validate_title(title)
        stored = await self._store_image(image)

        note = Note(
            title=title,
            slug=make_slug(title),
            image=stored.relative_path if stored else None,
            user_id=user_id,
        )

        try:
            note = await NoteRepository(db).add(note)
            await db.commit()
        except IntegrityError:
            if stored:
                await self.files.cleanup(stored.relative_path)
            raise ValidationError(message=DUPLICATE_TITLE, field="title", context={"title": title})
        except SQLAlchemyError as e:
            if stored:
                await self.files.cleanup(stored.relative_path)
            logger.error("Database error creating note: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the note. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Note created: %s (user=%s, image=%s)", note.id, user_id, bool(stored))
        return NoteResponse.model_validate(note)

    async def update_note(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        note_id: str,
        title: Optional[str] = None,
        image: Optional[ImageUpload] = None,
    ) -> NoteResponse:
        """
        Partially update an owned note.

        A None title leaves title and slug unchanged. A new image replaces
        the previous one, whose file is removed once the row is committed.
        A failed removal of that old file is logged and does not fail the
        request.
        """
        note = await self._load_owned(db, user_id, note_id)

        if title is not None:
            title = validate_title(title)

        stored = await self._store_image(image)
        previous_image = note.image

        if title is not None:
            note.title = title
            note.slug = make_slug(title)
        if stored:
            note.image = stored.relative_path

        try:
            note = await NoteRepository(db).save(note)
            await db.commit()
        except IntegrityError:
            if stored:
                await self.files.cleanup(stored.relative_path)
            raise ValidationError(message=DUPLICATE_TITLE, field="title", context={"title": title})
        except SQLAlchemyError as e:
            if stored:
                await self.files.cleanup(stored.relative_path)
            logger.error("Database error updating note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the note. Please try again.",
                context={"note_id": str(note_id), "error_type": type(e).__name__},
            )

        if stored and previous_image:
            # Committed: the row already points at the new file, so a failed
            # removal only leaves the old file behind (logged by cleanup).
            await self.files.cleanup(previous_image)

        logger.info("Note updated: %s (user=%s)", note.id, user_id)
        return NoteResponse.model_validate(note)

    async def delete_note(self, db: AsyncSession, user_id: uuid.UUID, note_id: str) -> None:
        """Remove the note's image file (if any), then the note itself."""
        note = await self._load_owned(db, user_id, note_id)

        if note.image:
            await self.files.remove(note.image)

        try:
            await NoteRepository(db).delete(note)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the note. Please try again.",
                context={"note_id": str(note_id), "error_type": type(e).__name__},
            )

        logger.info("Note deleted: %s (user=%s)", note_id, user_id)
