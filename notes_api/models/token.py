"""
Notes API - Refresh Token SQLAlchemy Model
==========================================

What:  ORM model for the `refresh_tokens` table: the single live refresh
       token tracked for each user.
How:   Upserted on login, overwritten on refresh, deleted on logout. A
       refresh token is accepted only while it is the value stored here, so
       rotating or logging out invalidates every earlier token.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from notes_api.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # unique: at most one tracked refresh token per user
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    token: Mapped[str] = mapped_column(Text, nullable=False, index=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    def __repr__(self) -> str:
        return f"<RefreshToken(user_id={self.user_id}, updated_at='{self.updated_at}')>"
