"""
Notes API - Authentication Gate
===============================

What:  FastAPI dependency guarding the note routes.
How:   Reads the accessToken cookie and verifies it with TokenService. Any
       problem (missing, malformed, forged, expired, refresh token passed
       as access token) raises UnauthorizedError("Unauthorized access")
       before the handler runs.
Who:   Declared on the notes router: Depends(require_user).

The token store is not consulted, so an access token stays usable after
logout until it expires.
"""

import uuid

from fastapi import Depends, Request

from notes_api.dependencies import get_token_service
from notes_api.services.token_service import TokenService


ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


async def require_user(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
) -> uuid.UUID:
    """Return the authenticated user id and record it on request.state.user_id."""
    user_id = tokens.verify_access(request.cookies.get(ACCESS_COOKIE, ""))
    request.state.user_id = user_id
    return user_id
