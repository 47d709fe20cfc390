"""
Notes API - Note Request/Response Schemas
=========================================

What:  Pydantic models for the /api/v1/notes contract.
How:   NoteResponse is built straight from the ORM object (from_attributes);
       the envelopes wrap it the way each endpoint returns it.
Who:   Returned by NoteService and serialized by the note routes.

Request bodies are multipart forms (title + optional image file), read by
the route handlers with Form()/File(); there is no JSON request model.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class NoteResponse(BaseModel):
    """Full representation of a note, identical for every endpoint."""

    id: uuid.UUID = Field(description="Unique note identifier (UUID)")
    title: str = Field(description="Note title (3-32 characters)")
    slug: str = Field(description="Lowercase slugified title")
    image: Optional[str] = Field(
        default=None,
        description="Image path relative to the server root, e.g. uploads/notes/note-<uuid>.png",
    )
    user_id: uuid.UUID = Field(description="Owner of the note")
    created_at: datetime = Field(description="Creation timestamp (UTC)")
    updated_at: datetime = Field(description="Last modification timestamp (UTC)")

    model_config = {"from_attributes": True}


class NoteEnvelope(BaseModel):
    """Returned by GET/PUT /api/v1/notes/{id}."""

    data: NoteResponse


class NoteCreatedResponse(BaseModel):
    """Returned by POST /api/v1/notes with HTTP 201."""

    message: str = Field(default="Note created successfully")
    data: NoteResponse


class NoteListResponse(BaseModel):
    """
    Page of the caller's notes, oldest first.

    `total` is the number of notes on THIS page, not the overall count.
    Clients detect the last page by total < limit.
    """

    total: int = Field(description="Number of notes on this page")
    page: int = Field(description="Page number that was served (1-based)")
    data: List[NoteResponse] = Field(description="Notes on this page")
