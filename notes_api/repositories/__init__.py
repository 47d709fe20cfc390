"""Repository layer: every SQL query the services run lives here."""

from notes_api.repositories.note_repository import NoteRepository
from notes_api.repositories.refresh_token_repository import RefreshTokenRepository
from notes_api.repositories.user_repository import UserRepository

__all__ = [
    "NoteRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
