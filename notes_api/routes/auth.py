"""
Notes API - Auth Route Handlers
===============================

What:  POST /api/v1/auth/{register,login,refresh,logout}.
How:   Handlers delegate to AuthService and own the HTTP-only parts:
       setting/clearing the token cookies and scheduling the welcome email
       as a background task.

Cookies:
    accessToken   access JWT,  Max-Age = ACCESS_TOKEN_TTL_MINUTES
    refreshToken  refresh JWT, Max-Age = REFRESH_TOKEN_TTL_DAYS
    Both HttpOnly; Secure and SameSite come from settings.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Cookie, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.config import Settings
from notes_api.database import get_db_session
from notes_api.dependencies import get_auth_service, get_settings, get_token_service
from notes_api.middleware.auth import ACCESS_COOKIE, REFRESH_COOKIE
from notes_api.schemas.auth import (
    Credentials,
    MessageResponse,
    RegisterResponse,
    TokenResponse,
)
from notes_api.schemas.common import ErrorResponse
from notes_api.services.auth_service import AuthService
from notes_api.services.token_service import TokenPair, TokenService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


def set_token_cookies(
    response: Response,
    pair: TokenPair,
    settings: Settings,
    tokens: TokenService,
) -> None:
    for key, value, max_age in (
        (ACCESS_COOKIE, pair.access_token, tokens.access_max_age),
        (REFRESH_COOKIE, pair.refresh_token, tokens.refresh_max_age),
    ):
        response.set_cookie(
            key=key,
            value=value,
            max_age=max_age,
            path="/",
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
        )


def clear_token_cookies(response: Response, settings: Settings) -> None:
    for key in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            key=key,
            path="/",
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
        )


def _fields(credentials: Optional[Credentials]) -> tuple:
    if credentials is None:
        return None, None
    return credentials.email, credentials.password


@router.post(
    "/register",
    status_code=201,
    response_model=RegisterResponse,
    responses={
        400: {"description": "Email or password missing", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    background_tasks: BackgroundTasks,
    credentials: Optional[Credentials] = None,
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """
    Responds as soon as the user row is written; the welcome email is sent
    after the response by a background task.
    """
    email, password = _fields(credentials)
    user_id = await auth.register(db, email, password)
    background_tasks.add_task(auth.send_welcome_email, email.strip())
    return RegisterResponse(id=user_id)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        400: {"description": "Email or password missing", "model": ErrorResponse},
        401: {"description": "Wrong credentials", "model": ErrorResponse},
    },
    summary="Log in and receive the token cookies",
)
async def login(
    response: Response,
    credentials: Optional[Credentials] = None,
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    email, password = _fields(credentials)
    pair = await auth.login(db, email, password)
    set_token_cookies(response, pair, settings, tokens)
    return TokenResponse(access_token=pair.access_token)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    responses={401: {"description": "Missing, invalid or revoked refresh token", "model": ErrorResponse}},
    summary="Rotate the refresh token and issue a new access token",
)
async def refresh(
    response: Response,
    refresh_token: Optional[str] = Cookie(default=None, alias=REFRESH_COOKIE),
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    pair = await auth.refresh(db, refresh_token)
    set_token_cookies(response, pair, settings, tokens)
    return TokenResponse(access_token=pair.access_token)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Revoke the refresh token and clear the cookies",
)
async def logout(
    response: Response,
    refresh_token: Optional[str] = Cookie(default=None, alias=REFRESH_COOKIE),
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    await auth.logout(db, refresh_token)
    clear_token_cookies(response, settings)
    return MessageResponse(message="user logged out successfully")
