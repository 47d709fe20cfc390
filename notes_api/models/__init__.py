"""ORM models. Importing this package registers every table on Base.metadata."""

from notes_api.models.note import Note
from notes_api.models.token import RefreshToken
from notes_api.models.user import User

__all__ = ["Note", "RefreshToken", "User"]
