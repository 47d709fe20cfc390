"""
Notes API - Note Store
======================

What:  Queries on `notes`, always filtered by owner.
Why:   Another user's note must be indistinguishable from a missing one, so
       no method can load a note by id alone; every read and write goes
       through the owner filter in _owned().
How:   Plain SQLAlchemy 2.0 select() on the request's AsyncSession. Writes
       flush but never commit; NoteService commits.
Who:   NoteService.

Why flush + refresh on add/save:
    The flush surfaces a duplicate title as IntegrityError inside the
    service's try block, and the refresh reloads the row as stored
    (timestamps included) before it is serialized.
"""

import uuid
from typing import List, Optional

from sqlalchemy import Select, asc, select
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.models.note import Note


class NoteRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _owned(user_id: uuid.UUID) -> Select:
        return select(Note).where(Note.user_id == user_id)

    async def get_owned(self, note_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Note]:
        """The note with `note_id` if `user_id` owns it, else None."""
        result = await self.db.execute(self._owned(user_id).where(Note.id == note_id))
        return result.scalar_one_or_none()

    async def list_owned(self, user_id: uuid.UUID, offset: int, limit: int) -> List[Note]:
        query = (
            self._owned(user_id)
            .order_by(asc(Note.created_at), asc(Note.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def add(self, note: Note) -> Note:
        """Insert and flush; a duplicate title raises IntegrityError here."""
        self.db.add(note)
        await self.db.flush()
        await self.db.refresh(note)
        return note

    async def save(self, note: Note) -> Note:
        """Flush pending changes on an owned note loaded by get_owned()."""
        await self.db.flush()
        await self.db.refresh(note)
        return note

    async def delete(self, note: Note) -> None:
        await self.db.delete(note)
        await self.db.flush()
