"""
Notes API - Auth Service
========================

What:  Registration, login, refresh-token rotation and logout.
Why:   Route handlers only deal with cookies and status codes; every rule
       about who may get a token, and which stored token is still live,
       sits here where it can be tested against a mocked session.
How:   Users and refresh tokens are persisted through their repositories on
       the request's session and committed before returning; tokens come
       from TokenService; the welcome email goes through MailService as a
       background task.
Who:   Called by the /api/v1/auth route handlers.
When:  Register and login once per session; refresh whenever the access
       token expires; logout on demand.

Refresh-token lifecycle (one live token per user):
    login    → issue pair, upsert token for user, commit
    refresh  → verify signature/expiry, look the token up, rotate it, commit
    logout   → delete the record holding the token, commit

A superseded or logged-out refresh token is still correctly signed but no
longer stored, so refresh rejects it with 401.

Why commit here (not in the session dependency):
    A 201 from register must mean the user exists. If the commit ran after
    the response, a client logging in straight away could get a 401, and a
    failed commit would be reported as success.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.exceptions import (
    ConflictError,
    DatabaseError,
    UnauthorizedError,
    ValidationError,
)
from notes_api.repositories import RefreshTokenRepository, UserRepository
from notes_api.security import burn_password_check, verify_password
from notes_api.services.mail_service import MailService
from notes_api.services.token_service import TokenPair, TokenService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "incorrect email or password"


def _require_credentials(email: Optional[str], password: Optional[str]) -> tuple:
    email = (email or "").strip()
    if not email or not password:
        raise ValidationError(message="email and password are required")
    return email, password


def _storage_failure(action: str, error: SQLAlchemyError) -> DatabaseError:
    logger.error("Database error during %s: %s", action, str(error), exc_info=True)
    return DatabaseError(
        message=f"{action} failed",
        context={"error_type": type(error).__name__},
    )


class AuthService:
    """
    Account and session operations.

    Stateless apart from its collaborators: the session is passed into every
    call, so one instance (on app.state) serves all requests.
    """

    def __init__(self, token_service: TokenService, mail_service: MailService):
        self.tokens = token_service
        self.mail = mail_service

    async def register(
        self,
        db: AsyncSession,
        email: Optional[str],
        password: Optional[str],
    ) -> uuid.UUID:
        """
        Create a user and return its id.

        Raises:
            ValidationError: email or password missing (400)
            ConflictError:   email already registered (409)
            DatabaseError:   any other storage failure, commit included (500)
        """
        email, password = _require_credentials(email, password)
        users = UserRepository(db)

        if await users.get_by_email(email) is not None:
            raise ConflictError(message="email already exists")

        try:
            user = await users.create(email, password)
            await db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            raise ConflictError(message="email already exists")
        except SQLAlchemyError as e:
            raise _storage_failure("registration", e)

        logger.info("User registered: %s", user.id)
        return user.id

    async def send_welcome_email(self, email: str) -> None:
        """Background task body. Delivery failures are logged, never raised."""
        try:
            await self.mail.send_welcome(email)
        except Exception as e:
            logger.error("Failed to send welcome email: %s", str(e), exc_info=True)

    async def login(
        self,
        db: AsyncSession,
        email: Optional[str],
        password: Optional[str],
    ) -> TokenPair:
        """
        Check credentials and issue a fresh token pair.

        Unknown email and wrong password raise the same UnauthorizedError;
        the unknown-email branch still runs a bcrypt check so both take
        about the same time.
        """
        email, password = _require_credentials(email, password)
        user = await UserRepository(db).get_by_email(email)

        if user is None:
            burn_password_check(password)
            raise UnauthorizedError(message=INVALID_CREDENTIALS, context={"reason": "unknown email"})

        if not verify_password(password, user.password):
            raise UnauthorizedError(message=INVALID_CREDENTIALS, context={"reason": "bad password"})

        pair = self.tokens.issue_pair(user.id)
        try:
            await RefreshTokenRepository(db).upsert_for_user(user.id, pair.refresh_token)
            await db.commit()
        except SQLAlchemyError as e:
            raise _storage_failure("login", e)

        logger.info("User logged in: %s", user.id)
        return pair

    async def refresh(self, db: AsyncSession, refresh_token: Optional[str]) -> TokenPair:
        """
        Exchange a stored refresh token for a new pair and rotate it.

        Raises UnauthorizedError for a missing, forged, expired or no longer
        stored token.
        """
        user_id = self.tokens.verify_refresh(refresh_token or "")

        store = RefreshTokenRepository(db)
        record = await store.get_by_token(refresh_token)
        if record is None or record.user_id != user_id:
            raise UnauthorizedError(
                message="Invalid refresh token",
                context={"reason": "token not in store"},
            )

        pair = self.tokens.issue_pair(user_id)
        try:
            await store.replace(record, pair.refresh_token)
            await db.commit()
        except SQLAlchemyError as e:
            raise _storage_failure("refresh", e)

        logger.info("Refresh token rotated for user %s", user_id)
        return pair

    async def logout(self, db: AsyncSession, refresh_token: Optional[str]) -> None:
        """Forget the stored refresh token. A missing or unknown token is a no-op."""
        if not refresh_token:
            return

        try:
            removed = await RefreshTokenRepository(db).delete_by_token(refresh_token)
            await db.commit()
        except SQLAlchemyError as e:
            raise _storage_failure("logout", e)

        if removed:
            logger.info("Refresh token revoked on logout")
