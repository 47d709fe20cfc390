"""
Notes API - Auth Request/Response Schemas
=========================================

What:  Pydantic models for the /api/v1/auth contract.

Credentials fields are optional on purpose: a missing email or password is
answered by AuthService with the 400 "email and password are required"
message rather than FastAPI's generic field errors.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Body of POST /register and POST /login."""

    email: Optional[str] = Field(default=None, description="User email address")
    password: Optional[str] = Field(default=None, description="Plain-text password")


class RegisterResponse(BaseModel):
    id: uuid.UUID = Field(description="Id of the newly created user")


class TokenResponse(BaseModel):
    """
    Body of POST /login and POST /refresh.

    Serialized as {"accessToken": "..."}; the same token is also set as the
    accessToken cookie, and the refresh token only travels as a cookie.
    """

    access_token: str = Field(alias="accessToken")

    model_config = {"populate_by_name": True}


class MessageResponse(BaseModel):
    message: str
