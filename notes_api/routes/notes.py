"""
Notes API - Notes Route Handlers
================================

What:  CRUD endpoints under /api/v1/notes, all scoped to the logged-in user.
How:   Every route depends on require_user; handlers read the multipart form,
       hand the upload to NoteService and shape the response envelope.
Who:   Called by the notes frontend.

Request Format (POST/PUT):
    multipart/form-data with a `title` field and an optional `image` file.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.database import get_db_session
from notes_api.dependencies import get_note_service
from notes_api.middleware.auth import require_user
from notes_api.schemas.common import ErrorResponse
from notes_api.schemas.note import (
    NoteCreatedResponse,
    NoteEnvelope,
    NoteListResponse,
)
from notes_api.services.note_service import ImageUpload, NoteService

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(
    prefix="/api/v1/notes",
    tags=["Notes"],
    dependencies=[Depends(require_user)],
    responses={401: {"description": "Not logged in", "model": ErrorResponse}},
)


async def read_upload(image: Optional[UploadFile]) -> Optional[ImageUpload]:
    """
    Read an optional multipart file into memory.

    Browsers send an empty part with no filename when no file was chosen;
    that counts as no upload.
    """
    if image is None or not image.filename:
        return None
    content = await image.read()
    return ImageUpload(
        filename=image.filename,
        content_type=image.content_type,
        content=content,
    )


@router.get(
    "",
    response_model=NoteListResponse,
    summary="List the caller's notes, oldest first",
)
async def list_notes(
    page: Optional[str] = Query(default=None, description="Page number (default 1)"),
    limit: Optional[str] = Query(default=None, description="Notes per page (default 4)"),
    user_id: uuid.UUID = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
    notes: NoteService = Depends(get_note_service),
) -> NoteListResponse:
    """Invalid page/limit values fall back to their defaults instead of failing."""
    return await notes.list_notes(db, user_id, page=page, limit=limit)


@router.get(
    "/{note_id}",
    response_model=NoteEnvelope,
    responses={404: {"description": "Note not found", "model": ErrorResponse}},
    summary="Get one of the caller's notes",
)
async def get_note(
    note_id: str,
    user_id: uuid.UUID = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
    notes: NoteService = Depends(get_note_service),
) -> NoteEnvelope:
    note = await notes.get_note(db, user_id, note_id)
    return NoteEnvelope(data=note)


@router.post(
    "",
    status_code=201,
    response_model=NoteCreatedResponse,
    responses={400: {"description": "Invalid title or image", "model": ErrorResponse}},
    summary="Create a note with an optional image",
)
async def create_note(
    title: Optional[str] = Form(default=None, description="Note title (3-32 characters)"),
    image: Optional[UploadFile] = File(default=None, description="Optional image file"),
    user_id: uuid.UUID = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
    notes: NoteService = Depends(get_note_service),
) -> NoteCreatedResponse:
    upload = await read_upload(image)
    note = await notes.create_note(db, user_id, title, upload)
    return NoteCreatedResponse(data=note)


@router.put(
    "/{note_id}",
    response_model=NoteEnvelope,
    responses={
        400: {"description": "Invalid title or image", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Update a note's title and/or image",
)
async def update_note(
    note_id: str,
    title: Optional[str] = Form(default=None, description="New title"),
    image: Optional[UploadFile] = File(default=None, description="Replacement image"),
    user_id: uuid.UUID = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
    notes: NoteService = Depends(get_note_service),
) -> NoteEnvelope:
    upload = await read_upload(image)
    note = await notes.update_note(db, user_id, note_id, title=title, image=upload)
    return NoteEnvelope(data=note)


@router.delete(
    "/{note_id}",
    status_code=204,
    response_class=Response,
    responses={404: {"description": "Note not found", "model": ErrorResponse}},
    summary="Delete a note and its image",
)
async def delete_note(
    note_id: str,
    user_id: uuid.UUID = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
    notes: NoteService = Depends(get_note_service),
) -> Response:
    await notes.delete_note(db, user_id, note_id)
    return Response(status_code=204)
