"""
Notes API - Note SQLAlchemy Model
=================================

What:  ORM model for the `notes` table.
Who:   Read and written only through NoteRepository, which applies the
       (id, user_id) owner filter to every query.

Table Design:
    - UUID primary key: non-sequential, cannot be enumerated
    - title: unique across ALL notes (not per user), 3-32 characters
    - slug: lowercase slugified title, regenerated whenever the title changes
    - image: path relative to the storage root, NULL when the note has no image
    - user_id: owner, set at creation and never changed
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from notes_api.database import Base

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 32


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A user's note with an optional attached image.

    Lifecycle:
        1. Created by POST /api/v1/notes (image stored first, path recorded)
        2. Title and/or image replaced by PUT; the replaced image file is removed
        3. Deleted by DELETE; its image file is removed before the row
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(
        String(TITLE_MAX_LENGTH),
        nullable=False,
        unique=True,
        comment="Note title, unique across all users",
    )

    slug: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Lowercase URL-safe form of the title",
    )

    image: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
        comment="Image path relative to the storage root",
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning user",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    # Every listing filters by owner and orders by creation time
    __table_args__ = (
        Index("idx_notes_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title='{self.title}', user_id={self.user_id})>"
