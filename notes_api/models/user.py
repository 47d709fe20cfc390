"""
Notes API - User SQLAlchemy Model
=================================

What:  ORM model for the `users` table.
How:   `password` holds a bcrypt hash; the plain password never reaches the
       database because UserRepository.create() hashes it before insert.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from notes_api.database import Base


class User(Base):
    """A registered account. Immutable after registration."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Unique constraint is what turns a duplicate registration into a 409
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    password: Mapped[str] = mapped_column(String(60), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
