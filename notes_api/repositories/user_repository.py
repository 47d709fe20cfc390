"""
Notes API - User Store
======================

What:  Lookups by email and id, and registration inserts.
Why:   Keeps password hashing next to the insert, so no code path can
       store a plaintext password.
Who:   AuthService (register, login).
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.models.user import User
from notes_api.security import hash_password


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def create(self, email: str, password: str) -> User:
        """
        Insert a user with the password hashed.

        Flushes immediately so a duplicate email surfaces here as
        sqlalchemy.exc.IntegrityError; AuthService commits afterwards.
        """
        user = User(email=email, password=hash_password(password))
        self.db.add(user)
        await self.db.flush()
        return user
