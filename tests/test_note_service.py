"""
Notes API - Note Service Unit Tests
===================================

What:  Tests for NoteService business logic against a mocked session.
How:   mock_db_session stands in for AsyncSession; FileService is real and
       writes to a temporary storage root so file side effects are visible.

What we test:
    ✅ Title validation and slug generation
    ✅ Paging parameter coercion
    ✅ Owner-scoped lookups raise NotFoundError (including malformed ids)
    ✅ Duplicate titles become ValidationError and stored files are cleaned up
    ✅ Image replacement and deletion side effects
    ✅ Writes are committed; a failed commit cleans up stored files
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from notes_api.exceptions import DatabaseError, FileStorageError, NotFoundError, ValidationError
from notes_api.models.note import Note
from notes_api.services.file_service import FileService
from notes_api.services.note_service import (
    ImageUpload,
    NoteService,
    coerce_positive_int,
    make_slug,
    validate_title,
)


def _duplicate_title_error():
    return IntegrityError("INSERT INTO notes", {}, Exception("UNIQUE constraint failed: notes.title"))


def _upload(content: bytes, filename: str = "photo.png") -> ImageUpload:
    return ImageUpload(filename=filename, content_type="image/png", content=content)


def _existing_note(user_id, image=None) -> Note:
    now = datetime.now(timezone.utc)
    return Note(
        id=uuid.uuid4(),
        title="Existing",
        slug="existing",
        image=image,
        user_id=user_id,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def file_service(temp_storage):
    return FileService(storage_root=temp_storage, upload_dir="uploads/notes", max_file_size=1024 * 1024)


class TestHelpers:
    """Tests for the pure helpers behind create/list."""

    @pytest.mark.parametrize(
        "title, slug",
        [
            ("My Note", "my-note"),
            ("Hello, World!", "hello-world"),
            ("  Spaced   Out  ", "spaced-out"),
            ("ÜBER Café", "uber-cafe"),
        ],
    )
    def test_make_slug(self, title, slug):
        assert make_slug(title) == slug

    def test_validate_title_trims(self):
        assert validate_title("  abc  ") == "abc"

    @pytest.mark.parametrize("title", [None, "", "   ", "ab", "x" * 33])
    def test_validate_title_rejects(self, title):
        with pytest.raises(ValidationError):
            validate_title(title)

    def test_validate_title_bounds(self):
        """3 and 32 characters are both accepted."""
        assert validate_title("abc") == "abc"
        assert validate_title("x" * 32) == "x" * 32

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("3", 3),
            (7, 7),
            (None, 4),
            ("abc", 4),
            ("0", 4),
            ("-2", 4),
            ("1.5", 4),
            (0, 4),
            (True, 4),
            ("99999999999999999999", 4),
            (2**31, 4),
            (str(2**31 - 1), 2**31 - 1),
        ],
    )
    def test_coerce_positive_int(self, value, expected):
        assert coerce_positive_int(value, 4) == expected


class TestNoteServiceQueries:
    """Tests for list_notes and get_note."""

    def setup_method(self):
        self.user_id = uuid.uuid4()

    @pytest.mark.asyncio
    async def test_get_note_not_found(self, mock_db_session, file_service):
        """A missing (or foreign) note raises NotFoundError with the id in the message."""
        service = NoteService(file_service)
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = None
        note_id = str(uuid.uuid4())

        with pytest.raises(NotFoundError, match=f"no note for this id: {note_id}"):
            await service.get_note(mock_db_session, self.user_id, note_id)

    @pytest.mark.asyncio
    async def test_get_note_malformed_id(self, mock_db_session, file_service):
        """A malformed id is reported as not found without querying."""
        service = NoteService(file_service)

        with pytest.raises(NotFoundError):
            await service.get_note(mock_db_session, self.user_id, "not-a-uuid")
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_note_success(self, mock_db_session, file_service):
        service = NoteService(file_service)
        note = _existing_note(self.user_id)
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note

        result = await service.get_note(mock_db_session, self.user_id, str(note.id))

        assert result.id == note.id
        assert result.user_id == self.user_id

    @pytest.mark.asyncio
    async def test_list_notes_total_is_page_size(self, mock_db_session, file_service):
        """`total` counts the notes on the returned page."""
        service = NoteService(file_service)
        notes = [_existing_note(self.user_id) for _ in range(2)]
        mock_db_session.execute.return_value.scalars.return_value.all.return_value = notes

        result = await service.list_notes(mock_db_session, self.user_id, page="abc", limit="-1")

        assert result.total == 2
        assert result.page == 1
        assert [n.id for n in result.data] == [n.id for n in notes]

    @pytest.mark.asyncio
    async def test_list_notes_database_error(self, mock_db_session, file_service):
        service = NoteService(file_service)
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))

        with pytest.raises(DatabaseError):
            await service.list_notes(mock_db_session, self.user_id)


class TestNoteServiceWrites:
    """Tests for create/update/delete and their file side effects."""

    def setup_method(self):
        self.user_id = uuid.uuid4()

    @pytest.mark.asyncio
    async def test_create_note_with_image(self, mock_db_session, file_service, sample_image_bytes):
        service = NoteService(file_service)

        result = await service.create_note(
            mock_db_session, self.user_id, " My Note ", _upload(sample_image_bytes)
        )

        assert result.title == "My Note"
        assert result.slug == "my-note"
        assert result.user_id == self.user_id
        assert result.image.startswith("uploads/notes/note-")
        assert file_service.resolve(result.image).read_bytes() == sample_image_bytes
        mock_db_session.add.assert_called_once()
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_note_without_image(self, mock_db_session, file_service):
        service = NoteService(file_service)

        result = await service.create_note(mock_db_session, self.user_id, "Plain")

        assert result.image is None

    @pytest.mark.asyncio
    async def test_create_note_invalid_title_stores_nothing(
        self, mock_db_session, file_service, sample_image_bytes
    ):
        """Title is checked before the upload is written."""
        service = NoteService(file_service)

        with pytest.raises(ValidationError):
            await service.create_note(mock_db_session, self.user_id, "ab", _upload(sample_image_bytes))
        assert not file_service.upload_path.exists()

    @pytest.mark.asyncio
    async def test_create_note_duplicate_title_cleans_up(
        self, mock_db_session, file_service, sample_image_bytes
    ):
        """A taken title is a ValidationError and the stored image is removed."""
        service = NoteService(file_service)
        mock_db_session.flush.side_effect = _duplicate_title_error()

        with pytest.raises(ValidationError, match="already exists"):
            await service.create_note(
                mock_db_session, self.user_id, "Taken", _upload(sample_image_bytes)
            )
        assert list(file_service.upload_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_create_note_commits(self, mock_db_session, file_service):
        service = NoteService(file_service)

        await service.create_note(mock_db_session, self.user_id, "Plain")

        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_note_commit_failure_cleans_up(
        self, mock_db_session, file_service, sample_image_bytes
    ):
        """A failed commit is a DatabaseError, and the image stored for it is removed."""
        service = NoteService(file_service)
        mock_db_session.commit.side_effect = OperationalError("COMMIT", {}, Exception("disk I/O error"))

        with pytest.raises(DatabaseError):
            await service.create_note(
                mock_db_session, self.user_id, "Ghost Note", _upload(sample_image_bytes)
            )
        assert list(file_service.upload_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_update_note_not_found_stores_nothing(
        self, mock_db_session, file_service, sample_image_bytes
    ):
        service = NoteService(file_service)
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = None

        with pytest.raises(NotFoundError):
            await service.update_note(
                mock_db_session, self.user_id, str(uuid.uuid4()), image=_upload(sample_image_bytes)
            )
        assert not file_service.upload_path.exists()

    @pytest.mark.asyncio
    async def test_update_note_title_regenerates_slug(self, mock_db_session, file_service):
        service = NoteService(file_service)
        note = _existing_note(self.user_id)
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note

        result = await service.update_note(mock_db_session, self.user_id, str(note.id), title="New Title")

        assert result.title == "New Title"
        assert result.slug == "new-title"

    @pytest.mark.asyncio
    async def test_update_note_replaces_image(self, mock_db_session, file_service, sample_image_bytes):
        """The previous image file is removed once the new one is recorded."""
        service = NoteService(file_service)
        old = await file_service.save_upload("old.png", "image/png", sample_image_bytes)
        note = _existing_note(self.user_id, image=old.relative_path)
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note

        result = await service.update_note(
            mock_db_session, self.user_id, str(note.id), image=_upload(b"new-image-bytes")
        )

        assert result.image != old.relative_path
        assert not old.absolute_path.exists()
        assert file_service.resolve(result.image).read_bytes() == b"new-image-bytes"
        assert result.title == "Existing"

    @pytest.mark.asyncio
    async def test_update_note_failure_keeps_previous_image(
        self, mock_db_session, file_service, sample_image_bytes
    ):
        """If the update fails the new file is cleaned up and the old one kept."""
        service = NoteService(file_service)
        old = await file_service.save_upload("old.png", "image/png", sample_image_bytes)
        note = _existing_note(self.user_id, image=old.relative_path)
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note
        mock_db_session.flush.side_effect = _duplicate_title_error()

        with pytest.raises(ValidationError):
            await service.update_note(
                mock_db_session, self.user_id, str(note.id), title="Taken", image=_upload(b"new")
            )

        assert old.absolute_path.exists()
        assert [p.name for p in file_service.upload_path.iterdir()] == [old.absolute_path.name]

    @pytest.mark.asyncio
    async def test_update_note_commit_failure_keeps_previous_image(
        self, mock_db_session, file_service, sample_image_bytes
    ):
        service = NoteService(file_service)
        old = await file_service.save_upload("old.png", "image/png", sample_image_bytes)
        note = _existing_note(self.user_id, image=old.relative_path)
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note
        mock_db_session.commit.side_effect = OperationalError("COMMIT", {}, Exception("disk I/O error"))

        with pytest.raises(DatabaseError):
            await service.update_note(mock_db_session, self.user_id, str(note.id), image=_upload(b"new"))

        assert [p.name for p in file_service.upload_path.iterdir()] == [old.absolute_path.name]

    @pytest.mark.asyncio
    async def test_update_note_old_image_removal_failure_is_logged(
        self, mock_db_session, file_service, sample_image_bytes, caplog
    ):
        """Once committed, the update stands even if the old file cannot be removed."""
        service = NoteService(file_service)
        old = await file_service.save_upload("old.png", "image/png", sample_image_bytes)
        note = _existing_note(self.user_id, image=old.relative_path)
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note

        with patch.object(
            file_service, "remove", new_callable=AsyncMock, side_effect=FileStorageError("busy")
        ):
            result = await service.update_note(
                mock_db_session, self.user_id, str(note.id), image=_upload(b"new")
            )

        assert result.image != old.relative_path
        assert file_service.resolve(result.image).read_bytes() == b"new"
        assert "Failed to clean up file" in caplog.text

    @pytest.mark.asyncio
    async def test_delete_note_removes_image(self, mock_db_session, file_service, sample_image_bytes):
        service = NoteService(file_service)
        stored = await file_service.save_upload("a.png", "image/png", sample_image_bytes)
        note = _existing_note(self.user_id, image=stored.relative_path)
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note

        await service.delete_note(mock_db_session, self.user_id, str(note.id))

        assert not stored.absolute_path.exists()
        mock_db_session.delete.assert_awaited_once_with(note)

    @pytest.mark.asyncio
    async def test_delete_note_without_image_touches_no_files(self, mock_db_session, temp_storage):
        """No image means no file-system deletion at all."""
        files = FileService(storage_root=temp_storage, upload_dir="uploads/notes", max_file_size=1024)
        service = NoteService(files)
        note = _existing_note(self.user_id)
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note

        with patch.object(files, "remove", new_callable=AsyncMock) as mock_remove:
            await service.delete_note(mock_db_session, self.user_id, str(note.id))

        mock_remove.assert_not_awaited()
        mock_db_session.delete.assert_awaited_once_with(note)

    @pytest.mark.asyncio
    async def test_delete_note_not_found(self, mock_db_session, file_service):
        service = NoteService(file_service)
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = None

        with pytest.raises(NotFoundError):
            await service.delete_note(mock_db_session, self.user_id, str(uuid.uuid4()))
        mock_db_session.delete.assert_not_awaited()

