"""Application error taxonomy.

Every error a request handler raises on purpose is an ``AppError``; the
handlers registered in ``tasktracker.main`` turn it into the uniform
``{"success": false, "message": ...}`` body with the matching status.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input fields."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid value"


class Unauthorized(AppError):
    """Missing, invalid or expired credential, or a credential for a user that no longer exists."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not allowed"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(AppError):
    """Duplicate unique key. Reported as 400, not 409."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Already exists"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"
