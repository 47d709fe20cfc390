"""
Notes API - Refresh Token Store
===============================

What:  Queries on `refresh_tokens`, the one tracked refresh token per user.
Why:   A refresh token is only honoured while it is the stored value, so
       rotation and logout come down to overwriting or deleting this row.
How:   Login writes with INSERT ... ON CONFLICT (user_id) DO UPDATE, a
       single statement, so two first logins for the same user cannot both
       insert and trip uq_refresh_tokens_user_id.
Who:   AuthService (login, refresh, logout).
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.models.token import RefreshToken

# Dialects whose INSERT supports ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class RefreshTokenRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        dialect = self.db.bind.dialect.name
        try:
            return _UPSERT_INSERTS[dialect](RefreshToken)
        except KeyError:
            raise NotImplementedError(f"refresh token upsert is not supported on {dialect}")

    async def upsert_for_user(self, user_id: uuid.UUID, token: str) -> None:
        """Store `token` as the user's refresh token, replacing any previous one."""
        stmt = self._insert().values(
            id=uuid.uuid4(),
            user_id=user_id,
            token=token,
            updated_at=datetime.now(timezone.utc),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[RefreshToken.user_id],
            set_={"token": stmt.excluded.token, "updated_at": stmt.excluded.updated_at},
        )
        await self.db.execute(stmt)

    async def get_by_token(self, token: str) -> Optional[RefreshToken]:
        result = await self.db.execute(
            select(RefreshToken).where(RefreshToken.token == token)
        )
        return result.scalar_one_or_none()

    async def replace(self, record: RefreshToken, new_token: str) -> None:
        """Rotate: the record loaded by get_by_token() now holds `new_token`."""
        record.token = new_token
        await self.db.flush()

    async def delete_by_token(self, token: str) -> int:
        """Delete the record holding `token`. Returns the number of rows removed."""
        result = await self.db.execute(
            delete(RefreshToken).where(RefreshToken.token == token)
        )
        return result.rowcount or 0
