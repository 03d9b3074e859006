"""
core/errors.py -- Error taxonomy shared by every layer.

Every store, service and dependency operation either returns a value or raises
exactly one ApiError subclass. api/main.py owns the exception handlers that
turn these into the JSON error envelope; nothing below the route layer builds
HTTP responses.

Layer rule: no imports from api/, auth/, db/ or users/.
"""

from __future__ import annotations


class ApiError(Exception):
    """Base class for errors that map onto an HTTP status.

    clear_cookie names a cookie the error response must delete. The auth
    dependency uses it to drop a session cookie whose user no longer exists.
    """

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None, *, clear_cookie: str | None = None) -> None:
        self.message = message or self.default_message
        self.clear_cookie = clear_cookie
        super().__init__(self.message)


class BadRequest(ApiError):
    status_code = 400
    default_message = "Bad request"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Conflict"


class InternalError(ApiError):
    """Unexpected failure below the service layer (usually the database)."""
