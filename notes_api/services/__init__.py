"""
Notes API - Services Layer
==========================

What:  Business logic sitting between routes (HTTP) and repositories (SQL).
How:   create_app() constructs one instance of each service from Settings
       and stores it on app.state; routes receive them via
       notes_api.dependencies.

Service Inventory:
    - FileService:  image upload validation, storage and removal
    - TokenService: JWT access/refresh pair minting and verification
    - MailService:  welcome email delivery over SMTP
    - AuthService:  register, login, refresh rotation, logout
    - NoteService:  owner-scoped note CRUD
"""

from notes_api.services.auth_service import AuthService
from notes_api.services.file_service import FileService, StoredFile
from notes_api.services.mail_service import MailService
from notes_api.services.note_service import ImageUpload, NoteService
from notes_api.services.token_service import TokenPair, TokenService

__all__ = [
    "AuthService",
    "FileService",
    "ImageUpload",
    "MailService",
    "NoteService",
    "StoredFile",
    "TokenPair",
    "TokenService",
]
