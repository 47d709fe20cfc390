"""
Notes API - Custom Exception Hierarchy
======================================

What:  Application-specific exceptions, each tied to one HTTP status.
How:   Every exception carries a user-facing message and a context dict that
       is logged server-side but never returned to the client. The handler
       registered in main.py reads status_code and error_code from the class.
Who:   Raised by services, repositories and the auth gate at the point of
       detection; never caught by route handlers.

Exception Hierarchy:
    NotesAPIError (base, 500)
    ├── ValidationError      → 400 Bad Request
    ├── UnauthorizedError    → 401 Unauthorized
    ├── NotFoundError        → 404 Not Found
    ├── ConflictError        → 409 Conflict
    ├── FileStorageError     → 500 Internal Server Error
    └── DatabaseError        → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class NotesAPIError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, NOT returned to client)
    """

    status_code: int = 500
    error_code: str = "internal_server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotesAPIError):
    """
    Client input is missing or invalid.

    When: missing title/email/password, title length out of range, duplicate
    note title, unsupported or oversized image upload.
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(NotesAPIError):
    """
    Credentials or tokens were rejected.

    The message never reveals which part failed (unknown email vs wrong
    password, expired vs forged token); the reason goes into context.
    """

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Unauthorized access",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NotesAPIError):
    """
    The resource does not exist for the caller.

    Notes owned by another user are reported exactly like missing ones.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"no {resource} for this id: {resource_id}"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(NotesAPIError):
    """A unique field (the user's email) is already taken."""

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(NotesAPIError):
    """
    A file system operation on the image storage failed.

    When: disk full, permission denied, or an existing image could not be
    deleted while deleting or updating its note.
    """

    error_code = "file_storage_error"

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(NotesAPIError):
    """
    A database operation failed unexpectedly.

    The response message is always generic; details stay in the log.
    """

    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
