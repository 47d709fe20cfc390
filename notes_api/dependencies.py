"""
FastAPI dependencies exposing the collaborators create_app() put on app.state.

Tests build their own app with create_app(settings, mail_service=...) and get
isolated instances; nothing here is a module-level singleton.
"""

from fastapi import Request

from notes_api.config import Settings
from notes_api.services.auth_service import AuthService
from notes_api.services.file_service import FileService
from notes_api.services.note_service import NoteService
from notes_api.services.token_service import TokenService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_file_service(request: Request) -> FileService:
    return request.app.state.file_service


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_note_service(request: Request) -> NoteService:
    return request.app.state.note_service
