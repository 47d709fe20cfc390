"""
Notes API - Token Service
=========================

What:  Mints and verifies the JWT access/refresh pair.
Why:   Sessions are stateless on the access side: require_user can accept a
       request from the signature alone, with no database read. Only
       refresh tokens are checked against the store.
How:   PyJWT, HS256 by default. Access and refresh tokens are signed with
       separate secrets and carry a "type" claim, so neither kind can stand
       in for the other.
Who:   AuthService (login/refresh) and the require_user gate.
When:  On every authenticated request (verify_access) and on login/refresh
       (issue_pair, verify_refresh).

Claims:
    sub   user id (UUID string)
    type  "access" | "refresh"
    jti   random id; two tokens minted in the same second still differ
    iat   issued at
    exp   expiry

Why separate secrets (not just the type claim):
    A leaked access secret must not let anyone mint refresh tokens, which
    live for days instead of minutes.

Failure handling:
    Every verification failure (missing, malformed, bad signature, expired,
    wrong type, bad subject) raises UnauthorizedError with one fixed
    message per token kind. The actual reason goes into the error context
    and never into the response body.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from notes_api.config import Settings
from notes_api.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    def __init__(self, settings: Settings):
        self.algorithm = settings.jwt_algorithm
        self._secrets = {
            ACCESS: settings.jwt_access_secret,
            REFRESH: settings.jwt_refresh_secret,
        }
        self.access_ttl = timedelta(minutes=settings.access_token_ttl_minutes)
        self.refresh_ttl = timedelta(days=settings.refresh_token_ttl_days)

    @property
    def access_max_age(self) -> int:
        """Cookie Max-Age (seconds) for the access token."""
        return int(self.access_ttl.total_seconds())

    @property
    def refresh_max_age(self) -> int:
        return int(self.refresh_ttl.total_seconds())

    def _encode(self, user_id: uuid.UUID, token_type: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "type": token_type,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, self._secrets[token_type], algorithm=self.algorithm)

    def create_access_token(self, user_id: uuid.UUID) -> str:
        return self._encode(user_id, ACCESS, self.access_ttl)

    def create_refresh_token(self, user_id: uuid.UUID) -> str:
        return self._encode(user_id, REFRESH, self.refresh_ttl)

    def issue_pair(self, user_id: uuid.UUID) -> TokenPair:
        return TokenPair(
            access_token=self.create_access_token(user_id),
            refresh_token=self.create_refresh_token(user_id),
        )

    def _decode(self, token: str, token_type: str, message: str) -> uuid.UUID:
        """
        Verify signature, expiry and type; return the user id from `sub`.

        Every failure raises UnauthorizedError with the same message; the
        reason only goes into context.
        """
        if not token:
            raise UnauthorizedError(message=message, context={"reason": "missing token"})

        try:
            payload = jwt.decode(
                token,
                self._secrets[token_type],
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "type"]},
            )
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError(message=message, context={"reason": "expired"})
        except jwt.InvalidTokenError as e:
            raise UnauthorizedError(
                message=message,
                context={"reason": "invalid", "error_type": type(e).__name__},
            )

        if payload.get("type") != token_type:
            raise UnauthorizedError(message=message, context={"reason": "wrong token type"})

        try:
            return uuid.UUID(payload["sub"])
        except (TypeError, ValueError):
            raise UnauthorizedError(message=message, context={"reason": "invalid subject"})

    def verify_access(self, token: str) -> uuid.UUID:
        return self._decode(token, ACCESS, "Unauthorized access")

    def verify_refresh(self, token: str) -> uuid.UUID:
        return self._decode(token, REFRESH, "Invalid refresh token")
